"""Default bot settings, with environment overrides."""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DEFAULTS = {
    "model": os.environ.get("GHOST_MODEL", "claude-sonnet-4-5-20250929"),
    "max_tokens": 16000,
    "request_timeout": float(os.environ.get("GHOST_TIMEOUT", 600)),
    "build_attempts": int(os.environ.get("GHOST_BUILD_ATTEMPTS", 1)),  # 1 = fail-fast
    "audit_review": _env_flag("GHOST_AUDIT_REVIEW"),
    "database_url": os.environ.get("DATABASE_URL", "sqlite:///ghostcoder.db"),
    "prefix": os.environ.get("PREFIX", "!"),
    "timezone": "Asia/Kolkata",
    "fallback_files": ["main.py", "requirements.txt", "README.md"],
    "overview_preview": 500,
    "job_ttl": 3600,
    "max_jobs": 50,
}

# Progress bands: plan call starts at plan_percent, the build loop spans
# build_band percent after it, the audit step reports audit_percent.
PROGRESS = {
    "start_percent": 0,
    "plan_percent": 10,
    "build_band": 70,
    "audit_percent": 95,
    "done_percent": 100,
}
