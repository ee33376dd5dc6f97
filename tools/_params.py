"""Parameter extraction for tool handlers.

Handlers receive loosely-typed JSON arguments. These helpers pull out the
values a handler needs, check their types and domains, and raise ParamError
before any upstream call is made.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeVar

T = TypeVar("T")

MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 30


class ParamError(ValueError):
    """Raised when a tool argument is missing, mistyped or out of range."""


_TYPE_NAMES = {str: "string", bool: "boolean", int: "integer", list: "array"}


def _is_type(value: Any, typ: type) -> bool:
    # bool is an int subclass; never let True pass as a number or vice versa
    if typ is not bool and isinstance(value, bool):
        return False
    return isinstance(value, typ)


def required_param(args: dict[str, Any], name: str, typ: type[T]) -> T:
    """Return a required argument, rejecting absent, mistyped or empty values."""
    if name not in args or args[name] is None:
        raise ParamError(f"missing required parameter: {name}")
    value = args[name]
    if not _is_type(value, typ):
        raise ParamError(f"parameter {name} is not of type {_TYPE_NAMES.get(typ, typ.__name__)}")
    if not value:
        raise ParamError(f"missing required parameter: {name}")
    return value


def optional_param(args: dict[str, Any], name: str, typ: type[T], default: T) -> T:
    """Return an optional argument or ``default`` when it is absent."""
    value = args.get(name)
    if value is None:
        return default
    if not _is_type(value, typ):
        raise ParamError(f"parameter {name} is not of type {_TYPE_NAMES.get(typ, typ.__name__)}")
    return value


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ParamError(f"parameter {name} is not of type integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ParamError(f"parameter {name} is not of type integer")


def required_int(args: dict[str, Any], name: str) -> int:
    """Return a required integer argument. Zero counts as missing."""
    if args.get(name) is None:
        raise ParamError(f"missing required parameter: {name}")
    value = _as_int(name, args[name])
    if value == 0:
        raise ParamError(f"missing required parameter: {name}")
    return value


def optional_int(args: dict[str, Any], name: str, default: int = 0) -> int:
    value = args.get(name)
    if value is None:
        return default
    return _as_int(name, value)


def optional_string_array(args: dict[str, Any], name: str) -> list[str]:
    """Return a list of strings; a lone string is accepted as a one-item list."""
    value = args.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ParamError(f"parameter {name} must be an array of strings")
    return list(value)


@dataclass(frozen=True)
class Pagination:
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE

    def to_params(self) -> dict[str, int]:
        return {"page": self.page, "per_page": self.per_page}


def pagination_params(
    args: dict[str, Any],
    per_page_key: str = "perPage",
    default_per_page: int = DEFAULT_PER_PAGE,
) -> Pagination:
    """Extract ``page`` and the per-page argument, enforcing their bounds."""
    page = optional_int(args, "page", 1)
    per_page = optional_int(args, per_page_key, default_per_page)
    if page < 1:
        raise ParamError("page must be greater than or equal to 1")
    if not 1 <= per_page <= MAX_PER_PAGE:
        raise ParamError(f"{per_page_key} must be between 1 and {MAX_PER_PAGE}")
    return Pagination(page=page, per_page=per_page)


def with_pagination(per_page_key: str = "perPage") -> dict[str, Any]:
    """JSON-schema properties for the standard pagination arguments."""
    return {
        "page": {
            "type": "integer",
            "description": "Page number for pagination (min 1)",
            "minimum": 1,
        },
        per_page_key: {
            "type": "integer",
            "description": "Results per page for pagination (min 1, max 100)",
            "minimum": 1,
            "maximum": MAX_PER_PAGE,
        },
    }
