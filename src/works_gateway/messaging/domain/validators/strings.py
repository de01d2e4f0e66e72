from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from works_gateway.shared.exceptions import ValidationError


def validate_string_param(value: Any, name: str, max_length: Optional[int] = None) -> None:
    """
    Require a non-empty string, optionally bounded by max_length.

    Raises:
        ValidationError: naming the parameter on the first violated rule
    """
    if not value or not isinstance(value, str):
        raise ValidationError(
            f"Parameter '{name}' is required and must be a string.",
            details={"field": name},
        )
    if max_length and len(value) > max_length:
        raise ValidationError(
            f"Parameter '{name}' must be at most {max_length} characters.",
            details={"field": name, "max_length": max_length},
        )


def require_one_of(params: Mapping[str, Any], names: Sequence[str], *, path: str = "") -> str:
    """Return the first of `names` present in params; fail if none is."""
    for name in names:
        if params.get(name):
            return name
    quoted = ", ".join(f"'{path}{n}'" for n in names)
    raise ValidationError(
        f"One of {quoted} must be specified.",
        details={"fields": [f"{path}{n}" for n in names]},
    )


def require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValidationError(f"Parameter '{name}' must be an object.", details={"field": name})
    return value


def require_list(value: Any, name: str, *, min_items: int = 1, max_items: Optional[int] = None) -> list:
    if not isinstance(value, list) or len(value) < min_items:
        raise ValidationError(
            f"Parameter '{name}' is required and must contain at least {min_items} item(s).",
            details={"field": name},
        )
    if max_items is not None and len(value) > max_items:
        raise ValidationError(
            f"Parameter '{name}' accepts at most {max_items} items.",
            details={"field": name, "max_items": max_items},
        )
    return value
