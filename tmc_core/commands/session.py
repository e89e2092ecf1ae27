"""
Commands that change who is logged in and which server is used.
"""

import logging
from dataclasses import dataclass, field

from tmc_core.core.context import CoreContext

from .base import Command, require

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authenticate(Command[bool]):
    """Verifies credentials with the server and keeps them for later requests."""

    username: str
    password: str = field(repr=False)

    def check_data(self) -> None:
        require(username=self.username, password=self.password)

    async def call(self, context: CoreContext) -> bool:
        if not await context.service.authenticate(self.username, self.password):
            return False
        context.session.log_in(self.username, self.password)
        return True


@dataclass(frozen=True)
class Logout(Command[bool]):
    async def call(self, context: CoreContext) -> bool:
        return context.session.log_out()


@dataclass(frozen=True)
class ChooseServer(Command[bool]):
    address: str

    def check_data(self) -> None:
        require(address=self.address)

    async def call(self, context: CoreContext) -> bool:
        context.session.server_address = self.address
        return True
