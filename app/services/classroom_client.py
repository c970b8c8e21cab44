"""
Async client for the Google Classroom REST API.

One instance per caller and per request: it carries that caller's bearer
token and is used inside ``async with``. Every collection endpoint is
cursor-paginated; ``fetch_all`` follows ``nextPageToken`` until it is gone.
"""
import asyncio
import logging
import re
from typing import Any, Optional, Sequence

import httpx

from app.core.config import (
    CLASSROOM_API_BASE,
    MAX_CONCURRENT_REQUESTS,
    MAX_RETRIES,
    PAGE_SIZE,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_BASE_SECONDS,
)
from app.core.errors import AuthError, FetchError
from app.schemas.classroom import Course, CourseWork, Student, StudentSubmission, Teacher, UserProfile

logger = logging.getLogger(__name__)

RETRY_STATUSES = {429, 500, 502, 503, 504}

_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def is_valid_id(value: str) -> bool:
    return bool(_ID_RE.fullmatch(value or ""))


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str):
            return body.get("error_description") or err
    return response.reason_phrase


def _json_body(path: str, response: httpx.Response) -> dict[str, Any]:
    if not response.content:
        return {}
    try:
        body = response.json()
    except ValueError:
        raise FetchError(path, response.status_code, "response is not JSON")
    if not isinstance(body, dict):
        raise FetchError(path, response.status_code, "response is not a JSON object")
    return body


class ClassroomClient:
    def __init__(
        self,
        access_token: str,
        base_url: str = CLASSROOM_API_BASE,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        page_size: int = PAGE_SIZE,
        max_retries: int = MAX_RETRIES,
        retry_base_seconds: float = RETRY_BASE_SECONDS,
        max_concurrency: int = MAX_CONCURRENT_REQUESTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not access_token:
            raise AuthError("Access token is required")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self.max_retries = max_retries
        self.retry_base_seconds = retry_base_seconds
        self.headers = {"Authorization": f"Bearer {access_token}"}
        self._transport = transport
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ClassroomClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self.headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        if self._client is None:
            raise RuntimeError("ClassroomClient must be used inside 'async with'")

        # only idempotent reads are retried
        attempts = 1 + (self.max_retries if method == "GET" else 0)
        error: FetchError | None = None

        for attempt in range(attempts):
            try:
                async with self._semaphore:
                    response = await self._client.request(method, path, params=params, json=json)
            except httpx.TimeoutException:
                error = FetchError(path, None, "timed out")
            except httpx.TransportError as exc:
                error = FetchError(path, None, str(exc) or exc.__class__.__name__)
            else:
                if response.status_code == 401:
                    raise AuthError("Access token is invalid or expired")
                if response.is_success:
                    return _json_body(path, response)
                error = FetchError(path, response.status_code, _error_message(response))
                if response.status_code not in RETRY_STATUSES:
                    raise error

            if attempt + 1 < attempts:
                delay = self.retry_base_seconds * (2 ** attempt)
                logger.info("Retrying %s %s in %.2fs: %s", method, path, delay, error)
                await asyncio.sleep(delay)

        raise error

    async def fetch_all(
        self,
        path: str,
        field: str,
        params: Optional[dict[str, Any]] = None,
    ) -> list[dict[str, Any]]:
        """Collect ``field`` from every page of ``path``. A page without it adds nothing."""
        items: list[dict[str, Any]] = []
        page_token: Optional[str] = None
        seen_tokens: set[str] = set()

        while True:
            query = dict(params or {})
            query["pageSize"] = self.page_size
            if page_token:
                query["pageToken"] = page_token

            body = await self._request("GET", path, params=query)
            items.extend(body.get(field) or [])

            page_token = body.get("nextPageToken")
            if not page_token:
                return items
            if page_token in seen_tokens:
                logger.warning("Stopping pagination of %s: page token %r repeated", path, page_token)
                return items
            seen_tokens.add(page_token)

    # Courses

    async def list_courses(
        self,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        course_states: Sequence[str] = ("ACTIVE",),
    ) -> list[Course]:
        params: dict[str, Any] = {}
        if course_states:
            params["courseStates"] = list(course_states)
        if student_id:
            params["studentId"] = student_id
        if teacher_id:
            params["teacherId"] = teacher_id
        rows = await self.fetch_all("/courses", "courses", params)
        return [Course.model_validate(r) for r in rows]

    async def get_course(self, course_id: str) -> Course:
        return Course.model_validate(await self._request("GET", f"/courses/{course_id}"))

    # Rosters

    async def list_students(self, course_id: str) -> list[Student]:
        rows = await self.fetch_all(f"/courses/{course_id}/students", "students")
        return [Student.model_validate(r) for r in rows]

    async def list_teachers(self, course_id: str) -> list[Teacher]:
        rows = await self.fetch_all(f"/courses/{course_id}/teachers", "teachers")
        return [Teacher.model_validate(r) for r in rows]

    async def get_user_profile(self, user_id: str = "me") -> UserProfile:
        return UserProfile.model_validate(await self._request("GET", f"/userProfiles/{user_id}"))

    # Course work

    async def list_course_work(self, course_id: str) -> list[CourseWork]:
        rows = await self.fetch_all(f"/courses/{course_id}/courseWork", "courseWork")
        return [CourseWork.model_validate(r) for r in rows]

    async def list_submissions(
        self,
        course_id: str,
        course_work_id: str,
        user_id: Optional[str] = None,
    ) -> list[StudentSubmission]:
        params = {"userId": user_id} if user_id else None
        rows = await self.fetch_all(
            f"/courses/{course_id}/courseWork/{course_work_id}/studentSubmissions",
            "studentSubmissions",
            params,
        )
        return [StudentSubmission.model_validate(r) for r in rows]

    # Pass-through writes; Classroom stays the source of truth.

    async def grade_submission(
        self,
        course_id: str,
        course_work_id: str,
        submission_id: str,
        assigned_grade: Optional[float] = None,
        draft_grade: Optional[float] = None,
    ) -> StudentSubmission:
        body: dict[str, Any] = {}
        if assigned_grade is not None:
            body["assignedGrade"] = assigned_grade
        if draft_grade is not None:
            body["draftGrade"] = draft_grade
        if not body:
            raise ValueError("assigned_grade or draft_grade is required")

        path = f"/courses/{course_id}/courseWork/{course_work_id}/studentSubmissions/{submission_id}"
        data = await self._request(
            "PATCH",
            path,
            params={"updateMask": ",".join(body)},
            json=body,
        )
        return StudentSubmission.model_validate(data)

    async def return_submission(self, course_id: str, course_work_id: str, submission_id: str) -> None:
        path = f"/courses/{course_id}/courseWork/{course_work_id}/studentSubmissions/{submission_id}:return"
        await self._request("POST", path, json={})
