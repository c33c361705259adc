"""Counter settings and the permissive option resolver.

User options are merged over a table of defaults. An option is taken from
the user only when its type matches the default's type; anything else
(unknown keys, wrong types) is ignored and the default is kept. No error is
raised: a misconfigured option should still give a count rather than abort.

    settings = resolve_settings({"username": "octocat", "minCommits": 3})
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: dict[str, Any] = {
    "username": "",
    "access_token": "",
    "user_email_addresses": (),
    "user_names": (),
    "from_date": "",
    "until_date": "",
    "min_commits": 1,
    "request_timeout": 30.0,
    "max_pages": 1000,
    "max_concurrency": 1,
}

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


class Settings(BaseModel):
    """Resolved, read-only settings for one counter."""

    model_config = ConfigDict(frozen=True)

    username: str = DEFAULT_OPTIONS["username"]
    access_token: str = DEFAULT_OPTIONS["access_token"]
    user_email_addresses: tuple[str, ...] = DEFAULT_OPTIONS["user_email_addresses"]
    user_names: tuple[str, ...] = DEFAULT_OPTIONS["user_names"]
    from_date: str = DEFAULT_OPTIONS["from_date"]
    until_date: str = DEFAULT_OPTIONS["until_date"]
    min_commits: int = DEFAULT_OPTIONS["min_commits"]
    request_timeout: float = DEFAULT_OPTIONS["request_timeout"]
    max_pages: int = DEFAULT_OPTIONS["max_pages"]
    max_concurrency: int = DEFAULT_OPTIONS["max_concurrency"]

    def from_datetime(self) -> datetime | None:
        """Parse ``from_date``, or None when it is blank or unparseable."""
        return _parse_setting_date(self.from_date, "from_date")

    def until_datetime(self) -> datetime | None:
        """Parse ``until_date``, or None when it is blank or unparseable."""
        return _parse_setting_date(self.until_date, "until_date")


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def is_same_type(value: Any, default: Any) -> bool:
    """Check whether a user value may replace a default value.

    bool and int are kept apart, an int may stand in for a float, and any
    list/tuple/set of strings may stand in for a sequence default.
    """
    if isinstance(default, bool) or isinstance(value, bool):
        return type(value) is type(default)
    if isinstance(default, float):
        return isinstance(value, int | float)
    if isinstance(default, _SEQUENCE_TYPES):
        return isinstance(value, _SEQUENCE_TYPES) and all(
            isinstance(item, str) for item in value
        )
    return type(value) is type(default)


def get_option_value(options: Mapping[str, Any], option: str, default: Any) -> Any:
    """Return the user's value for an option if it is valid, else the default.

    The option is looked up under its snake_case name first, then under its
    camelCase name.
    """
    for key in (option, _camel_case(option)):
        if key in options:
            value = options[key]
            if is_same_type(value, default):
                if isinstance(default, _SEQUENCE_TYPES):
                    return tuple(value)
                return value
            logger.debug(
                f"Ignoring option {key}={value!r}: expected {type(default).__name__}"
            )
            return default
    return default


def resolve_options(
    options: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Merge user options over defaults.

    Args:
        options: User-supplied options, snake_case or camelCase keys
        defaults: Default option table (DEFAULT_OPTIONS if None)

    Returns:
        Dictionary holding every default key
    """
    options = options or {}
    defaults = DEFAULT_OPTIONS if defaults is None else defaults

    unknown = {
        _snake_case(key) if isinstance(key, str) else key for key in options
    } - set(defaults)
    if unknown:
        logger.debug(f"Ignoring unknown options: {sorted(str(key) for key in unknown)}")

    return {
        option: get_option_value(options, option, default)
        for option, default in defaults.items()
    }


def resolve_settings(options: Mapping[str, Any] | None = None) -> Settings:
    """Build Settings from user options, keeping defaults for anything invalid."""
    return Settings(**resolve_options(options))


def parse_date(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string as an aware datetime.

    Naive values are taken to be UTC.

    Raises:
        ValueError: If the value is not ISO-8601
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _parse_setting_date(value: str, name: str) -> datetime | None:
    if not value or not value.strip():
        return None
    try:
        return parse_date(value)
    except ValueError:
        logger.warning(f"Ignoring unparseable {name}: {value!r}")
        return None
