"""
Sends answers to an exercise's feedback questions.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from tmc_core.core.context import CoreContext
from tmc_core.exceptions import ValidationError
from tmc_core.models.domain import HttpResult

from .base import Command, require


@dataclass(frozen=True)
class SendFeedback(Command[HttpResult]):
    answers: Mapping[str, str]
    url: str

    def check_data(self) -> None:
        if not self.answers:
            raise ValidationError("Feedback answers are empty or missing.")
        require(url=self.url)

    async def call(self, context: CoreContext) -> HttpResult:
        return await context.service.send_feedback(dict(self.answers), self.url)
