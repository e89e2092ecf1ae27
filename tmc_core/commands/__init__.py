"""
Commands.

One class per operation offered by the core. Each command validates its own
arguments in ``check_data`` and does its work in the async ``call``.
"""

from .base import Command
from .courses import GetCourse, GetCourseByName, ListCourses, ListExercises
from .download import DownloadExercises
from .exercise import Paste, RunTests, Submit
from .feedback import SendFeedback
from .session import Authenticate, ChooseServer, Logout
from .updates import GetExerciseUpdates, GetUnreadReviews

__all__ = [
    "Authenticate",
    "ChooseServer",
    "Command",
    "DownloadExercises",
    "GetCourse",
    "GetCourseByName",
    "GetExerciseUpdates",
    "GetUnreadReviews",
    "ListCourses",
    "ListExercises",
    "Logout",
    "Paste",
    "RunTests",
    "SendFeedback",
    "Submit",
]
