import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Google endpoints
CLASSROOM_API_BASE = "https://classroom.googleapis.com/v1"
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
CLASSROOM_WEB_BASE = "https://classroom.google.com"

# OAuth client. DEV defaults; real values come from env vars.
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID", "")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET", "")
GOOGLE_REDIRECT_URI = os.getenv(
    "GOOGLE_REDIRECT_URI", "http://localhost:8000/oauth/callback"
)

OAUTH_SCOPES = [
    "https://www.googleapis.com/auth/classroom.courses.readonly",
    "https://www.googleapis.com/auth/classroom.coursework.students",
    "https://www.googleapis.com/auth/classroom.coursework.me.readonly",
    "https://www.googleapis.com/auth/classroom.rosters.readonly",
    "https://www.googleapis.com/auth/classroom.profile.emails",
    "https://www.googleapis.com/auth/classroom.profile.photos",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
    "openid",
]

# Classroom fetching
PAGE_SIZE = 100
REQUEST_TIMEOUT_SECONDS = 15.0
MAX_RETRIES = 3  # extra attempts for idempotent GETs
RETRY_BASE_SECONDS = 0.5  # backoff: base * 2**attempt
MAX_CONCURRENT_REQUESTS = 8

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/classroom_progress.db")

# Student status policy (completion is a percentage, grades are raw points)
AT_RISK_COMPLETION = 50.0
BEHIND_COMPLETION = 75.0
EXCELLENT_COMPLETION = 90.0
EXCELLENT_GRADE = 90.0

# Alert policy
CRITICAL_COMPLETION = 25.0
LOW_COMPLETION = 50.0
LOW_GRADE = 60.0
LATE_ALERT_THRESHOLD = 2  # alert when late_count is above this
LATE_CRITICAL_THRESHOLD = 5

# Commission health, as percent of students at risk
COMMISSION_CRITICAL_RISK_PCT = 30.0
COMMISSION_WARNING_RISK_PCT = 15.0
COMMISSION_EXCELLENT_PROGRESS = 85.0

UPCOMING_DEADLINES_LIMIT = 5
RECENT_ACTIVITY_LIMIT = 10
RECOMMENDATIONS_PER_STUDENT = 3
