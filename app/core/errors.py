class ClassroomError(Exception):
    """Base class for failures talking to Google."""


class AuthError(ClassroomError):
    """
    Missing, invalid or expired credentials. The user must sign in again.

    ``status`` is the HTTP status to answer with when Google (or our own
    configuration) decided the outcome; None means a plain 401.
    """

    def __init__(self, message: str = "", status: int | None = None):
        super().__init__(message)
        self.status = status


class FetchError(ClassroomError):
    def __init__(self, path: str, status: int | None, message: str = ""):
        self.path = path
        self.status = status
        detail = message or "request failed"
        if status is None:
            super().__init__(f"Classroom API error on {path}: {detail}")
        else:
            super().__init__(f"Classroom API error on {path}: {status} {detail}")
