"""
In-memory stand-in for the Classroom REST API, served through
httpx.MockTransport. Pagination, ``me`` resolution and the roster filters
behave like the real service closely enough for the dashboards.
"""
import json
from collections import defaultdict

import httpx


class FakeClassroom:
    def __init__(self):
        self.users: dict[str, dict] = {}
        self.tokens: dict[str, str] = {}
        self.courses: dict[str, dict] = {}
        self.students: dict[str, list[str]] = defaultdict(list)
        self.teachers: dict[str, list[str]] = defaultdict(list)
        self.course_work: dict[str, list[dict]] = defaultdict(list)
        self.submissions: dict[tuple[str, str], list[dict]] = defaultdict(list)
        self.failures: dict[str, int] = {}
        self.requests: list[tuple[str, str, dict]] = []

    # setup helpers

    def add_user(self, user_id: str, full_name: str, email: str, token: str | None = None):
        self.users[user_id] = {
            "id": user_id,
            "name": {"fullName": full_name},
            "emailAddress": email,
        }
        if token:
            self.tokens[token] = user_id

    def add_course(self, course_id: str, name: str, section=None, teachers=(), students=()):
        self.courses[course_id] = {
            "id": course_id,
            "name": name,
            "section": section,
            "courseState": "ACTIVE",
        }
        self.teachers[course_id].extend(teachers)
        self.students[course_id].extend(students)

    def add_work(self, course_id: str, work_id: str, title: str, created: str, due=None, max_points=100):
        work = {
            "id": work_id,
            "courseId": course_id,
            "title": title,
            "state": "PUBLISHED",
            "creationTime": created,
            "maxPoints": max_points,
        }
        if due:
            year, month, day = (int(p) for p in due.split("-"))
            work["dueDate"] = {"year": year, "month": month, "day": day}
            work["dueTime"] = {"hours": 12}
        self.course_work[course_id].append(work)

    def add_submission(self, course_id, work_id, sub_id, user_id, state="CREATED", late=False, grade=None):
        sub = {
            "id": sub_id,
            "courseId": course_id,
            "courseWorkId": work_id,
            "userId": user_id,
            "state": state,
            "late": late,
        }
        if grade is not None:
            sub["assignedGrade"] = grade
        self.submissions[(course_id, work_id)].append(sub)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self, method: str = "GET") -> list[str]:
        return [p for m, p, _ in self.requests if m == method]

    # request handling

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/v1"):
            path = path[len("/v1"):]
        params = dict(request.url.params)
        self.requests.append((request.method, path, params))

        token = request.headers.get("authorization", "").replace("Bearer ", "", 1)
        me = self.tokens.get(token)
        if me is None:
            return _error(401, "Request had invalid authentication credentials.")

        if path in self.failures:
            return _error(self.failures[path], "Injected failure")

        parts = path.strip("/").split("/")

        if parts[0] == "userProfiles" and len(parts) == 2:
            user = self.users.get(me if parts[1] == "me" else parts[1])
            return httpx.Response(200, json=user) if user else _error(404, "User not found")

        if parts[0] != "courses":
            return _error(404, "Not found")

        if len(parts) == 1:
            return self._page(self._list_courses(params, me), "courses", params)

        course_id = parts[1]
        if course_id not in self.courses:
            return _error(404, "Requested entity was not found.")

        if len(parts) == 2:
            return httpx.Response(200, json=self.courses[course_id])

        if parts[2] in ("students", "teachers") and len(parts) == 3:
            roster = self.students if parts[2] == "students" else self.teachers
            rows = [
                {"courseId": course_id, "userId": uid, "profile": self.users.get(uid, {"id": uid})}
                for uid in roster[course_id]
            ]
            return self._page(rows, parts[2], params)

        if parts[2] == "courseWork" and len(parts) == 3:
            return self._page(self.course_work[course_id], "courseWork", params)

        if parts[2] == "courseWork" and len(parts) >= 5 and parts[4] == "studentSubmissions":
            work_id = parts[3]
            subs = self.submissions[(course_id, work_id)]
            if len(parts) == 5:
                user_id = params.get("userId")
                if user_id == "me":
                    user_id = me
                rows = [s for s in subs if user_id is None or s["userId"] == user_id]
                return self._page(rows, "studentSubmissions", params)
            return self._write_submission(request, subs, parts[5])

        return _error(404, "Not found")

    def _list_courses(self, params: dict, me: str) -> list[dict]:
        student_id = params.get("studentId")
        teacher_id = params.get("teacherId")
        if student_id == "me":
            student_id = me
        if teacher_id == "me":
            teacher_id = me

        rows = []
        for course_id, course in self.courses.items():
            if student_id and student_id not in self.students[course_id]:
                continue
            if teacher_id and teacher_id not in self.teachers[course_id]:
                continue
            rows.append(course)
        return rows

    def _write_submission(self, request: httpx.Request, subs: list[dict], tail: str) -> httpx.Response:
        sub_id, _, action = tail.partition(":")
        sub = next((s for s in subs if s["id"] == sub_id), None)
        if sub is None:
            return _error(404, "Submission not found")

        if request.method == "POST" and action == "return":
            sub["state"] = "RETURNED"
            return httpx.Response(200, json={})

        if request.method == "PATCH" and not action:
            body = json.loads(request.content or b"{}")
            mask = request.url.params.get("updateMask", "")
            for field in filter(None, mask.split(",")):
                if field in body:
                    sub[field] = body[field]
            return httpx.Response(200, json=sub)

        return _error(400, "Unsupported operation")

    def _page(self, rows: list[dict], field: str, params: dict) -> httpx.Response:
        size = int(params.get("pageSize", 100))
        offset = int(params.get("pageToken", 0))
        chunk = rows[offset:offset + size]
        body: dict = {}
        if chunk:
            body[field] = chunk
        if offset + size < len(rows):
            body["nextPageToken"] = str(offset + size)
        return httpx.Response(200, json=body)


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


def school() -> FakeClassroom:
    """
    Two courses, two teachers, three students and a coordinator.

    Math - A (t1): s1, s2       History (t1, t2): s1, s3
    """
    fake = FakeClassroom()
    fake.add_user("t1", "Ana Teacher", "ana@school.edu", token="tok-t1")
    fake.add_user("t2", "Bruno Teacher", "bruno@school.edu", token="tok-t2")
    fake.add_user("s1", "Sofia Student", "sofia@school.edu", token="tok-s1")
    fake.add_user("s2", "Tomas Student", "tomas@school.edu", token="tok-s2")
    fake.add_user("s3", "Uma Student", "uma@school.edu", token="tok-s3")
    fake.add_user("c1", "Carla Coordinator", "carla@school.edu", token="tok-c1")

    fake.add_course("c-math", "Math", section="A", teachers=["t1"], students=["s1", "s2"])
    fake.add_course("c-hist", "History", teachers=["t1", "t2"], students=["s1", "s3"])

    fake.add_work("c-math", "w1", "Fractions", "2024-01-01T09:00:00Z", due="2024-01-10")
    fake.add_work("c-math", "w2", "Decimals", "2024-01-02T09:00:00Z", due="2099-01-01")
    fake.add_work("c-math", "w3", "Reading log", "2024-01-03T09:00:00Z")
    fake.add_work("c-hist", "h1", "Essay", "2024-01-05T09:00:00Z", due="2099-02-01")

    fake.add_submission("c-math", "w1", "sub-w1-s1", "s1", state="RETURNED", grade=90)
    fake.add_submission("c-math", "w2", "sub-w2-s1", "s1", state="TURNED_IN")
    fake.add_submission("c-math", "w3", "sub-w3-s2", "s2", state="CREATED", late=True)
    fake.add_submission("c-hist", "h1", "sub-h1-s1", "s1", state="CREATED")
    fake.add_submission("c-hist", "h1", "sub-h1-s3", "s3", state="TURNED_IN", grade=70)
    return fake
