"""
Client-side core for exercise-management services.
"""

__version__ = "0.1.0"

from tmc_core.core.dispatcher import TmcCore  # noqa: E402
from tmc_core.models.config import CoreSettings  # noqa: E402

__all__ = ["CoreSettings", "TmcCore", "__version__"]
