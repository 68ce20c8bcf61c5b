"""
Input sanitisation, password policy, credential hashing and login throttling.
"""

import logging
import re
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from werkzeug.security import check_password_hash, generate_password_hash

from app.config import settings
from app.exceptions import RateLimitError

logger = logging.getLogger("dietplanner.security")

PASSWORD_MIN_LENGTH = 8
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'
COMMON_PASSWORD_PATTERNS = [
    "password",
    "123456",
    "password123",
    "admin",
    "qwerty",
    "abc123",
    "letmein",
    "welcome",
    "12345678",
    "iloveyou",
    "princess",
    "rockyou",
    "123123",
    "baseball",
    "football",
]

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")
_JS_SCHEME_RE = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"on\w+=", re.IGNORECASE)

STRENGTH_LABELS = ["Very Weak", "Weak", "Fair", "Good", "Strong", "Very Strong"]


def validate_password_security(password: str) -> Tuple[bool, List[str]]:
    """
    Check a password against the account password policy.

    Returns:
        (is_valid, errors) where errors lists every unmet requirement
    """
    errors: List[str] = []

    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not _SPECIAL_RE.search(password):
        errors.append("Password must contain at least one special character")

    lowered = password.lower()
    if any(pattern in lowered for pattern in COMMON_PASSWORD_PATTERNS):
        errors.append("Password contains common patterns that are not secure")

    return not errors, errors


def password_strength(password: str) -> dict:
    """Score a password 0-5 with a label and hints for what is missing"""
    score = 0
    feedback: List[str] = []

    if len(password) >= PASSWORD_MIN_LENGTH:
        score += 1
    else:
        feedback.append(f"Use at least {PASSWORD_MIN_LENGTH} characters")
    if re.search(r"[A-Z]", password):
        score += 1
    else:
        feedback.append("Add uppercase letters")
    if re.search(r"[a-z]", password):
        score += 1
    else:
        feedback.append("Add lowercase letters")
    if re.search(r"\d", password):
        score += 1
    else:
        feedback.append("Add numbers")
    if _SPECIAL_RE.search(password):
        score += 1
    else:
        feedback.append("Add special characters")

    if any(pattern in password.lower() for pattern in COMMON_PASSWORD_PATTERNS):
        score = max(0, score - 2)
        feedback.append("Avoid common passwords")

    return {"score": score, "label": STRENGTH_LABELS[score], "feedback": feedback}


def sanitize_input(value: str) -> str:
    """Strip markup and script-injection fragments, then trim whitespace"""
    if value is None:
        return value
    cleaned = value.replace("<", "").replace(">", "")
    cleaned = _JS_SCHEME_RE.sub("", cleaned)
    cleaned = _EVENT_HANDLER_RE.sub("", cleaned)
    return cleaned.strip()


def normalize_email(email: str) -> str:
    return sanitize_input(email or "").lower()


def validate_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


def hash_password(password: str) -> str:
    return generate_password_hash(password, method=settings.password_hash_method)


def verify_password(password_hash: str, password: str) -> bool:
    return check_password_hash(password_hash, password)


# ============================================================================
# Login throttling
# ============================================================================


@dataclass
class _Attempts:
    count: int = 0
    last_attempt: float = field(default=0.0)


class LoginRateLimiter:
    """
    In-process attempt counter keyed by identifier (the normalised email).

    An identifier may make ``max_attempts`` attempts; the counter resets once
    ``window_sec`` has passed since its last attempt, rejected ones included.
    """

    def __init__(
        self,
        max_attempts: int = None,
        window_sec: float = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts or settings.login_max_attempts
        self.window_sec = window_sec or settings.login_window_sec
        self._clock = clock
        self._attempts: Dict[str, _Attempts] = {}
        self._lock = threading.Lock()

    def check(self, identifier: str) -> bool:
        """Record an attempt; return False when the identifier is over budget"""
        now = self._clock()
        with self._lock:
            entry = self._attempts.get(identifier)
            if entry is None or now - entry.last_attempt > self.window_sec:
                self._attempts[identifier] = _Attempts(count=1, last_attempt=now)
                return True
            # Rejected attempts still count and push the window forward
            entry.count += 1
            entry.last_attempt = now
            return entry.count <= self.max_attempts

    def hit(self, identifier: str) -> None:
        """Record an attempt or raise RateLimitError"""
        if not self.check(identifier):
            logger.warning("login_rate_limited identifier=%s", identifier)
            raise RateLimitError("Too many login attempts. Please try again later.")

    def reset(self, identifier: str = None) -> None:
        with self._lock:
            if identifier is None:
                self._attempts.clear()
            else:
                self._attempts.pop(identifier, None)


login_rate_limiter = LoginRateLimiter()
