from __future__ import annotations

import datetime
import math
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


@dataclass(frozen=True)
class ValidationResult:
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_email(email: Any) -> bool:
    if not email or not isinstance(email, str):
        return False
    return EMAIL_RE.match(email.strip()) is not None


def validate_password(password: Any) -> bool:
    if not password or not isinstance(password, str):
        return False
    return len(password) >= MIN_PASSWORD_LENGTH


def validate_required(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def parse_exchange_date(value: Any) -> Optional[datetime.datetime]:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def validate_signup_form(email: Any, password: Any, name: Any) -> ValidationResult:
    errors: List[str] = []

    if not validate_required(email):
        errors.append("Email is required")
    elif not validate_email(email):
        errors.append("Email format is invalid")

    if not validate_required(password):
        errors.append("Password is required")
    elif not isinstance(password, str):
        errors.append("Password must be text")
    elif not validate_password(password):
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if not validate_required(name):
        errors.append("Name is required")
    elif not isinstance(name, str):
        errors.append("Name must be text")

    return ValidationResult(errors)


def validate_login_form(email: Any, password: Any) -> ValidationResult:
    errors: List[str] = []

    if not validate_required(email):
        errors.append("Email is required")
    elif not validate_email(email):
        errors.append("Email format is invalid")

    if not validate_required(password):
        errors.append("Password is required")
    elif not isinstance(password, str):
        errors.append("Password must be text")

    return ValidationResult(errors)


def validate_exchange_form(
    name: Any,
    exchange_date: Any,
    gift_budget: Any = None,
) -> ValidationResult:
    errors: List[str] = []

    if not validate_required(name):
        errors.append("Exchange name is required")
    elif not isinstance(name, str):
        errors.append("Exchange name must be text")

    if not validate_required(exchange_date):
        errors.append("Exchange date is required")
    elif parse_exchange_date(exchange_date) is None:
        errors.append("Exchange date is invalid")

    if gift_budget is not None:
        # bool is an int subclass
        if (
            isinstance(gift_budget, bool)
            or not isinstance(gift_budget, (int, float))
            or not math.isfinite(gift_budget)
            or gift_budget < 0
        ):
            errors.append("Gift budget must be a non-negative number")

    return ValidationResult(errors)
