from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from works_gateway.messaging.domain.validators.strings import validate_string_param
from works_gateway.messaging.domain.validators.urls import validate_url
from works_gateway.shared.exceptions import ValidationError


def _no_extra_fields(action: Mapping[str, Any], path: str) -> None:
    return None


def _postback(action: Mapping[str, Any], path: str) -> None:
    validate_string_param(action.get("postback"), f"{path}.postback")


def _uri(action: Mapping[str, Any], path: str) -> None:
    validate_url(action.get("uri"), f"{path}.uri")


def _copy(action: Mapping[str, Any], path: str) -> None:
    validate_string_param(action.get("copyText"), f"{path}.copyText")


ACTION_RULES: Dict[str, Callable[[Mapping[str, Any], str], None]] = {
    "postback": _postback,
    "message": _no_extra_fields,
    "uri": _uri,
    "camera": _no_extra_fields,
    "cameraRoll": _no_extra_fields,
    "location": _no_extra_fields,
    "copy": _copy,
}


def validate_action_object(action: Any, path: str, is_default_action: bool = False) -> None:
    """
    Validate one action object.

    `label` is required except for default actions (the tap target of a
    list element or carousel column).
    """
    if not isinstance(action, Mapping):
        raise ValidationError(f"'{path}' must be an object.", details={"field": path})

    validate_string_param(action.get("type"), f"{path}.type")
    if not is_default_action:
        validate_string_param(action.get("label"), f"{path}.label")

    rule = ACTION_RULES.get(action["type"])
    if rule is None:
        raise ValidationError(
            f"'{path}.type' has an unsupported value: {action['type']}",
            details={"field": f"{path}.type", "allowed": sorted(ACTION_RULES)},
        )
    rule(action, path)


def validate_action(actions: Any, is_nested: bool = False, *, path: Optional[str] = None) -> None:
    """
    Validate an action, a flat list of actions, or (is_nested) a grid of
    action rows. A falsy value is accepted as "no actions".
    """
    if not actions:
        return
    if path is None:
        path = "action" if isinstance(actions, Mapping) else "actions"

    if is_nested:
        if not isinstance(actions, list):
            raise ValidationError(f"'{path}' must be a list of action rows.", details={"field": path})
        for row_index, row in enumerate(actions):
            if not isinstance(row, list):
                raise ValidationError(
                    f"'{path}[{row_index}]' must be a list of actions.",
                    details={"field": f"{path}[{row_index}]"},
                )
            for col_index, action in enumerate(row):
                validate_action_object(action, f"{path}[{row_index}][{col_index}]")
        return

    if isinstance(actions, list):
        for index, action in enumerate(actions):
            validate_action_object(action, f"{path}[{index}]")
    elif isinstance(actions, Mapping):
        validate_action_object(actions, path)
    else:
        raise ValidationError(f"'{path}' must be an object or a list of objects.", details={"field": path})
