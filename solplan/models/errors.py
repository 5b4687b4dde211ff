# solplan/models/errors.py
from __future__ import annotations

import numbers


class ProjectionError(ValueError):
    """Base class for engine failures the caller can turn into 'no result'."""


class InvalidInputError(ProjectionError):
    """Non-positive price, negative balance, bad horizon or simulation count."""


class ConfigurationError(ProjectionError):
    """Unrecognized growth model, decay mode, frequency or inflation type."""


def require(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidInputError(message)


def parse_choice(enum_cls, value, field: str):
    """Coerce an enum member or its string value; unknown values are a ConfigurationError."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"{field}: unrecognized value {value!r} (expected one of {allowed})") from None


def is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def require_numbers(obj, *fields: str) -> None:
    """Every named attribute of `obj` must be a real number (bools excluded)."""
    for name in fields:
        value = getattr(obj, name)
        if not is_number(value):
            raise InvalidInputError(f"{name} must be a number, got {value!r}")
