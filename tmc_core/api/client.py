"""
Async client for the exercise service's JSON API, built on aiohttp.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Optional

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from tmc_core.exceptions import DataError, TransportError
from tmc_core.models.config import CoreSettings
from tmc_core.models.domain import Course, Exercise, HttpResult, Review

from .auth import SessionState

log = logging.getLogger(__name__)


class TmcApiClient:
    """
    aiohttp implementation of the ServiceClient protocol.

    A new ClientSession is opened for every request. Each command runs on its
    own worker thread and event loop, so sessions are never shared.
    """

    def __init__(self, settings: CoreSettings, session_state: SessionState):
        self.settings = settings
        self.session_state = session_state

    def _base_url(self) -> str:
        address = self.session_state.server_address
        if not address:
            raise DataError("No server selected. Call select_server first.")
        return address

    def _client_params(self) -> dict[str, str]:
        return {
            "api_version": self.settings.api_version,
            "client": self.settings.client_name,
            "client_version": self.settings.client_version,
        }

    def _open_session(self, authenticate: bool = True) -> aiohttp.ClientSession:
        auth = None
        credentials = self.session_state.credentials
        if authenticate and credentials:
            auth = aiohttp.BasicAuth(credentials.username, credentials.password)
        return aiohttp.ClientSession(
            auth=auth,
            headers={"Accept-Encoding": "gzip, deflate"},
            timeout=aiohttp.ClientTimeout(
                total=self.settings.request_timeout, connect=15
            ),
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        read: str = "json",
        session: Optional[aiohttp.ClientSession] = None,
        **kwargs: Any,
    ) -> Any:
        """
        Performs one request and returns the decoded body.

        Args:
            read: "json", "bytes" or "status" (returns an HttpResult).

        Raises:
            TransportError: On connection failures and non-2xx responses.
        """
        params = {**self._client_params(), **kwargs.pop("params", {})}
        owns_session = session is None
        session = session or self._open_session()
        try:
            async with session.request(method, url, params=params, **kwargs) as r:
                log.debug(f"{method} {url} -> {r.status}")
                if read == "status":
                    body = await r.text()
                    return HttpResult(status_code=r.status, data=body)
                if r.status >= 400:
                    raise TransportError(
                        f"{method} {url} failed with HTTP {r.status}.", status=r.status
                    )
                if read == "bytes":
                    return await r.read()
                return await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        finally:
            if owns_session:
                await session.close()

    async def authenticate(self, username: str, password: str) -> bool:
        url = f"{self._base_url()}/user"
        async with aiohttp.ClientSession(
            auth=aiohttp.BasicAuth(username, password),
            timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
        ) as session:
            result = await self._request("GET", url, read="status", session=session)
        if result.status_code in (401, 403):
            log.warning(f"[yellow]Authentication rejected for {username}.[/yellow]")
            return False
        if result.status_code >= 400:
            raise TransportError(
                f"Authentication request failed with HTTP {result.status_code}.",
                status=result.status_code,
            )
        return True

    async def list_courses(self) -> list[Course]:
        data = await self._request("GET", f"{self._base_url()}/courses.json")
        return [self._parse_course(c) for c in data.get("courses", [])]

    async def get_course(self, course_id: str) -> Course:
        return await self.get_course_by_url(
            f"{self._base_url()}/courses/{course_id}.json"
        )

    async def get_course_by_url(self, url: str) -> Course:
        data = await self._request("GET", url)
        return self._parse_course(data.get("course", data))

    async def download_exercise(self, exercise: Exercise) -> bytes:
        """Downloads an exercise archive, retrying transient failures."""
        url = exercise.zip_url
        if not url:
            if exercise.id is None:
                raise DataError(f"Exercise '{exercise.name}' has no download URL.")
            url = f"{self._base_url()}/exercises/{exercise.id}.zip"

        attempts = self.settings.download_attempts
        last_exception: Optional[TransportError] = None
        for attempt in range(1, attempts + 1):
            try:
                return await self._request("GET", url, read="bytes")
            except TransportError as e:
                if e.status is not None and e.status < 500:
                    raise
                last_exception = e
                log.debug(
                    f"Download attempt {attempt}/{attempts} for '{exercise.name}' "
                    f"failed: {e}. Retrying..."
                )
                if attempt < attempts:
                    await asyncio.sleep(1.5 * (2 ** (attempt - 1)))
        raise last_exception

    def _submission_form(self, payload: bytes, **fields: str) -> aiohttp.FormData:
        form = aiohttp.FormData()
        for key, value in fields.items():
            form.add_field(key, value)
        form.add_field(
            "submission[file]",
            payload,
            filename="submission.zip",
            content_type="application/zip",
        )
        return form

    def _return_url(self, exercise: Exercise) -> str:
        if not exercise.return_url:
            raise DataError(f"Exercise '{exercise.name}' has no submission URL.")
        return exercise.return_url

    async def submit(self, exercise: Exercise, payload: bytes) -> Any:
        return await self._request(
            "POST", self._return_url(exercise), data=self._submission_form(payload)
        )

    async def paste(self, exercise: Exercise, payload: bytes) -> str:
        data = await self._request(
            "POST",
            self._return_url(exercise),
            data=self._submission_form(payload, paste="1"),
        )
        paste_url = data.get("paste_url") if isinstance(data, dict) else None
        if not paste_url:
            raise TransportError("Server response did not contain a paste URL.")
        return paste_url

    async def send_feedback(self, answers: Mapping[str, str], url: str) -> HttpResult:
        form: dict[str, str] = {}
        for index, (question_id, answer) in enumerate(answers.items()):
            form[f"answers[{index}][question_id]"] = question_id
            form[f"answers[{index}][answer]"] = answer
        return await self._request("POST", url, read="status", data=form)

    async def get_reviews(self, course: Course) -> list[Review]:
        url = course.reviews_url or f"{self._base_url()}/courses/{course.id}/reviews.json"
        data = await self._request("GET", url)
        items = data.get("reviews", []) if isinstance(data, dict) else data
        try:
            return [Review.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise DataError(f"Malformed review data: {e}") from e

    @staticmethod
    def _parse_course(raw: Any) -> Course:
        try:
            return Course.model_validate(raw)
        except PydanticValidationError as e:
            raise DataError(f"Malformed course data: {e}") from e
