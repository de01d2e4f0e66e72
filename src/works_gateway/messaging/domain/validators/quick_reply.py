from __future__ import annotations

from typing import Any, Mapping

from works_gateway.messaging.domain.validators.actions import validate_action
from works_gateway.messaging.domain.validators.urls import HTTPS_RE
from works_gateway.shared.exceptions import ValidationError


def validate_quick_reply(quick_reply: Any) -> None:
    """Require a non-empty `items` list whose entries each carry an action."""
    if not isinstance(quick_reply, Mapping):
        raise ValidationError("Parameter 'quickReply' must be an object.", details={"field": "quickReply"})

    items = quick_reply.get("items")
    if not isinstance(items, list) or not items:
        raise ValidationError(
            "Parameter 'quickReply.items' must be a list with at least one item.",
            details={"field": "quickReply.items"},
        )

    for index, item in enumerate(items):
        path = f"quickReply.items[{index}]"
        if not isinstance(item, Mapping) or not item.get("action"):
            raise ValidationError(f"'{path}.action' is required.", details={"field": f"{path}.action"})

        image_url = item.get("imageUrl")
        if image_url and (not isinstance(image_url, str) or not HTTPS_RE.match(image_url)):
            raise ValidationError(
                f"'{path}.imageUrl' must be an HTTPS URL.",
                details={"field": f"{path}.imageUrl"},
            )

        validate_action(item["action"], False, path=f"{path}.action")
