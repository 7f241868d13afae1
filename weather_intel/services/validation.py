"""Form validation for report submissions."""

from __future__ import annotations

import re

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def validate_email(email: str | None) -> bool:
    email = (email or "").strip()
    if not email or len(email) > 254:
        return False
    if not EMAIL_PATTERN.match(email):
        return False

    local_part, domain = email.split("@", 1)
    if not local_part or len(local_part) > 64:
        return False
    if not domain or len(domain) > 253:
        return False
    if ".." in email:
        return False
    if local_part.startswith(".") or local_part.endswith("."):
        return False
    return True


def validate_submission(full_name: str | None, email: str | None, city: str | None) -> dict[str, str]:
    """Return field -> message for every invalid field; empty when all is well."""
    errors: dict[str, str] = {}
    if not (full_name or "").strip():
        errors["full_name"] = "Full name is required"
    if not (email or "").strip():
        errors["email"] = "Email is required"
    elif not validate_email(email):
        errors["email"] = "Please enter a valid email address"
    if not (city or "").strip():
        errors["city"] = "City is required"
    return errors


__all__ = ["validate_email", "validate_submission"]
