"""Payload validators. Each raises ValidationError on the first violated rule."""

from works_gateway.messaging.domain.validators.actions import (
    ACTION_RULES,
    validate_action,
    validate_action_object,
)
from works_gateway.messaging.domain.validators.quick_reply import validate_quick_reply
from works_gateway.messaging.domain.validators.strings import (
    require_list,
    require_mapping,
    require_one_of,
    validate_string_param,
)
from works_gateway.messaging.domain.validators.urls import (
    ALLOWED_IMAGE_EXTENSIONS,
    validate_image_url,
    validate_url,
)

__all__ = [
    "ACTION_RULES",
    "ALLOWED_IMAGE_EXTENSIONS",
    "require_list",
    "require_mapping",
    "require_one_of",
    "validate_action",
    "validate_action_object",
    "validate_image_url",
    "validate_quick_reply",
    "validate_string_param",
    "validate_url",
]
