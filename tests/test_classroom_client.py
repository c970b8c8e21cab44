import asyncio

import httpx
import pytest

from app.core.errors import AuthError, FetchError
from app.services.classroom_client import ClassroomClient, is_valid_id


def run(coro):
    return asyncio.run(coro)


async def _fetch(handler, path="/courses", field="courses", **client_kwargs):
    client_kwargs.setdefault("retry_base_seconds", 0)
    async with ClassroomClient("token", transport=httpx.MockTransport(handler), **client_kwargs) as client:
        return await client.fetch_all(path, field)


def test_fetch_all_follows_page_tokens_and_stops():
    pages = {
        None: {"courses": [{"id": "1"}, {"id": "2"}], "nextPageToken": "p2"},
        "p2": {"courses": [{"id": "3"}], "nextPageToken": "p3"},
        "p3": {"courses": [{"id": "4"}]},
    }
    seen = []

    def handler(request):
        token = request.url.params.get("pageToken")
        seen.append(token)
        assert request.url.params["pageSize"] == "100"
        assert request.headers["authorization"] == "Bearer token"
        return httpx.Response(200, json=pages[token])

    items = run(_fetch(handler))

    assert [i["id"] for i in items] == ["1", "2", "3", "4"]
    assert seen == [None, "p2", "p3"]


def test_fetch_all_empty_next_token_ends_pagination():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"courses": [{"id": "1"}], "nextPageToken": ""})

    assert len(run(_fetch(handler))) == 1
    assert len(calls) == 1


def test_fetch_all_page_without_field_adds_nothing():
    def handler(request):
        if request.url.params.get("pageToken"):
            return httpx.Response(200, json={})
        return httpx.Response(200, json={"courses": [{"id": "1"}], "nextPageToken": "next"})

    assert run(_fetch(handler)) == [{"id": "1"}]


def test_fetch_error_carries_path_and_status():
    def handler(request):
        return httpx.Response(403, json={"error": {"code": 403, "message": "The caller does not have permission"}})

    with pytest.raises(FetchError) as excinfo:
        run(_fetch(handler, path="/courses/c1/students", field="students"))

    assert excinfo.value.path == "/courses/c1/students"
    assert excinfo.value.status == 403
    assert "The caller does not have permission" in str(excinfo.value)


def test_unauthorized_becomes_auth_error():
    def handler(request):
        return httpx.Response(401, json={"error": {"code": 401, "message": "Invalid Credentials"}})

    with pytest.raises(AuthError):
        run(_fetch(handler))


def test_server_errors_are_retried_then_succeed():
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503, json={"error": {"message": "Backend Error"}})
        return httpx.Response(200, json={"courses": [{"id": "1"}]})

    assert run(_fetch(handler)) == [{"id": "1"}]
    assert len(attempts) == 3


def test_retries_are_bounded():
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(500)

    with pytest.raises(FetchError) as excinfo:
        run(_fetch(handler, max_retries=2))

    assert excinfo.value.status == 500
    assert len(attempts) == 3


def test_transport_error_has_no_status():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError) as excinfo:
        run(_fetch(handler, max_retries=0))

    assert excinfo.value.status is None
    assert excinfo.value.path == "/courses"


def test_repeated_page_token_stops_pagination():
    calls = []

    def handler(request):
        calls.append(request.url.params.get("pageToken"))
        return httpx.Response(200, json={"courses": [{"id": str(len(calls))}], "nextPageToken": "same"})

    items = run(_fetch(handler))

    assert calls == [None, "same"]
    assert [i["id"] for i in items] == ["1", "2"]


def test_success_with_html_body_is_a_fetch_error():
    def handler(request):
        return httpx.Response(200, text="<html>captive portal</html>")

    with pytest.raises(FetchError) as excinfo:
        run(_fetch(handler))

    assert excinfo.value.status == 200
    assert "not JSON" in str(excinfo.value)


def test_client_requires_token():
    with pytest.raises(AuthError):
        ClassroomClient("")


def test_list_submissions_sends_user_filter():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["userId"] = request.url.params.get("userId")
        return httpx.Response(
            200,
            json={
                "studentSubmissions": [
                    {"id": "s1", "courseId": "c1", "courseWorkId": "w1", "userId": "u1", "state": "TURNED_IN"}
                ]
            },
        )

    async def go():
        async with ClassroomClient("token", transport=httpx.MockTransport(handler)) as client:
            return await client.list_submissions("c1", "w1", user_id="u1")

    subs = run(go())

    assert seen == {"path": "/v1/courses/c1/courseWork/w1/studentSubmissions", "userId": "u1"}
    assert subs[0].is_submitted
    assert not subs[0].is_graded


def test_grade_submission_is_not_retried():
    attempts = []

    def handler(request):
        attempts.append(request)
        return httpx.Response(503)

    async def go():
        async with ClassroomClient("token", transport=httpx.MockTransport(handler), retry_base_seconds=0) as client:
            await client.grade_submission("c1", "w1", "s1", assigned_grade=8)

    with pytest.raises(FetchError):
        run(go())
    assert len(attempts) == 1
    assert attempts[0].method == "PATCH"
    assert attempts[0].url.params["updateMask"] == "assignedGrade"


@pytest.mark.parametrize(
    "value, expected",
    [("123456", True), ("abc_DEF-9", True), ("", False), ("../etc", False), ("a b", False)],
)
def test_is_valid_id(value, expected):
    assert is_valid_id(value) is expected
