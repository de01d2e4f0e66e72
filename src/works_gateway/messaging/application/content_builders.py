"""
Per-type content builders.

Each builder validates the caller fields for one message type and returns
the `content` object for the envelope. Optional fields that are absent are
left out of the content rather than sent as null.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

from works_gateway.messaging.domain.validators import (
    require_list,
    require_mapping,
    require_one_of,
    validate_action,
    validate_action_object,
    validate_image_url,
    validate_quick_reply,
    validate_string_param,
    validate_url,
)
from works_gateway.messaging.domain.value_objects import MessageType
from works_gateway.shared.exceptions import ValidationError

Content = Dict[str, Any]
ContentBuilder = Callable[[Mapping[str, Any]], Content]

TEXT_MAX_LENGTH = 2000
LINK_FIELD_MAX_LENGTH = 1000
URL_MAX_LENGTH = 1000
SUBTITLE_MAX_LENGTH = 1000
FLEX_ALT_TEXT_MAX_LENGTH = 400
MAX_COLUMNS = 10
MAX_ELEMENTS = 10


def _pick(params: Mapping[str, Any], *names: str) -> Content:
    return {name: params[name] for name in names if params.get(name)}


def _with_quick_reply(content: Content, params: Mapping[str, Any]) -> Content:
    quick_reply = params.get("quickReply")
    if quick_reply:
        validate_quick_reply(quick_reply)
        content["quickReply"] = quick_reply
    return content


def build_text(params: Mapping[str, Any]) -> Content:
    validate_string_param(params.get("text"), "text", TEXT_MAX_LENGTH)
    return _with_quick_reply({"type": "text", "text": params["text"]}, params)


def build_sticker(params: Mapping[str, Any]) -> Content:
    validate_string_param(params.get("packageId"), "packageId")
    validate_string_param(params.get("stickerId"), "stickerId")
    content = {"type": "sticker", "packageId": params["packageId"], "stickerId": params["stickerId"]}
    return _with_quick_reply(content, params)


def build_image(params: Mapping[str, Any]) -> Content:
    require_one_of(params, ("previewImageUrl", "originalContentUrl", "fileId"))
    for name in ("previewImageUrl", "originalContentUrl"):
        if params.get(name):
            validate_image_url(params[name], name)
    content = {"type": "image", **_pick(params, "previewImageUrl", "originalContentUrl", "fileId")}
    return _with_quick_reply(content, params)


def build_file(params: Mapping[str, Any]) -> Content:
    require_one_of(params, ("originalContentUrl", "fileId"))
    if params.get("originalContentUrl"):
        validate_url(params["originalContentUrl"], "originalContentUrl", URL_MAX_LENGTH)
    content = {"type": "file", **_pick(params, "originalContentUrl", "fileId")}
    return _with_quick_reply(content, params)


def build_link(params: Mapping[str, Any]) -> Content:
    validate_string_param(params.get("contentText"), "contentText", LINK_FIELD_MAX_LENGTH)
    validate_string_param(params.get("linkText"), "linkText", LINK_FIELD_MAX_LENGTH)
    validate_url(params.get("link"), "link", URL_MAX_LENGTH)
    content = {
        "type": "link",
        "contentText": params["contentText"],
        "linkText": params["linkText"],
        "link": params["link"],
    }
    return _with_quick_reply(content, params)


def build_button_template(params: Mapping[str, Any]) -> Content:
    validate_string_param(params.get("contentText"), "contentText")
    actions = require_list(params.get("actions"), "actions")
    for index, action in enumerate(actions):
        validate_action_object(action, f"actions[{index}]")
    content = {"type": "button_template", "contentText": params["contentText"], "actions": actions}
    return _with_quick_reply(content, params)


def _validate_cover_data(cover_data: Any) -> None:
    cover = require_mapping(cover_data, "coverData")
    if cover.get("backgroundImageUrl") and cover.get("backgroundFileId"):
        raise ValidationError(
            "Specify only one of 'coverData.backgroundImageUrl' and 'coverData.backgroundFileId'.",
            details={"fields": ["coverData.backgroundImageUrl", "coverData.backgroundFileId"]},
        )
    if cover.get("backgroundImageUrl"):
        validate_image_url(cover["backgroundImageUrl"], "coverData.backgroundImageUrl")


def build_list_template(params: Mapping[str, Any]) -> Content:
    elements = require_list(params.get("elements"), "elements", max_items=MAX_ELEMENTS)

    if params.get("coverData"):
        _validate_cover_data(params["coverData"])

    for index, element in enumerate(elements):
        path = f"elements[{index}]"
        element = require_mapping(element, path)
        validate_string_param(element.get("title"), f"{path}.title")
        if element.get("subtitle"):
            validate_string_param(element["subtitle"], f"{path}.subtitle", SUBTITLE_MAX_LENGTH)
        if element.get("originalContentUrl"):
            validate_image_url(element["originalContentUrl"], f"{path}.originalContentUrl")
        if element.get("defaultAction"):
            validate_action_object(element["defaultAction"], f"{path}.defaultAction", True)
        validate_action(element.get("action"), False, path=f"{path}.action")

    validate_action(params.get("actions"), True, path="actions")

    content = {"type": "list_template", **_pick(params, "coverData"), "elements": elements}
    content.update(_pick(params, "actions"))
    return _with_quick_reply(content, params)


def build_carousel(params: Mapping[str, Any]) -> Content:
    columns = require_list(params.get("columns"), "columns", max_items=MAX_COLUMNS)

    for index, column in enumerate(columns):
        path = f"columns[{index}]"
        column = require_mapping(column, path)
        require_one_of(column, ("originalContentUrl", "fileId"), path=f"{path}.")
        if column.get("originalContentUrl"):
            validate_image_url(column["originalContentUrl"], f"{path}.originalContentUrl")
        validate_string_param(column.get("text"), f"{path}.text")
        if not isinstance(column.get("actions"), list):
            raise ValidationError(f"'{path}.actions' must be a list.", details={"field": f"{path}.actions"})
        if column.get("defaultAction"):
            validate_action_object(column["defaultAction"], f"{path}.defaultAction", True)
        for action_index, action in enumerate(column["actions"]):
            validate_action_object(action, f"{path}.actions[{action_index}]")

    content = {
        "type": "carousel",
        "imageAspectRatio": params.get("imageAspectRatio") or "rectangle",
        "imageSize": params.get("imageSize") or "cover",
        "columns": columns,
    }
    return _with_quick_reply(content, params)


def build_image_carousel(params: Mapping[str, Any]) -> Content:
    columns = require_list(params.get("columns"), "columns", max_items=MAX_COLUMNS)

    for index, column in enumerate(columns):
        path = f"columns[{index}]"
        column = require_mapping(column, path)
        require_one_of(column, ("originalContentUrl", "fileId"), path=f"{path}.")
        if column.get("originalContentUrl"):
            validate_image_url(column["originalContentUrl"], f"{path}.originalContentUrl")
        validate_action(column.get("action"), False, path=f"{path}.action")

    return _with_quick_reply({"type": "image_carousel", "columns": columns}, params)


def build_flex(params: Mapping[str, Any]) -> Content:
    validate_string_param(params.get("altText"), "altText", FLEX_ALT_TEXT_MAX_LENGTH)
    contents = params.get("contents")
    if not contents or not isinstance(contents, Mapping):
        raise ValidationError("Parameter 'contents' is required and must be an object.", details={"field": "contents"})
    return _with_quick_reply({"type": "flex", "altText": params["altText"], "contents": contents}, params)


CONTENT_BUILDERS: Dict[MessageType, ContentBuilder] = {
    MessageType.TEXT: build_text,
    MessageType.STICKER: build_sticker,
    MessageType.IMAGE: build_image,
    MessageType.FILE: build_file,
    MessageType.LINK: build_link,
    MessageType.BUTTON_TEMPLATE: build_button_template,
    MessageType.LIST_TEMPLATE: build_list_template,
    MessageType.CAROUSEL: build_carousel,
    MessageType.IMAGE_CAROUSEL: build_image_carousel,
    MessageType.FLEX: build_flex,
}


def build_envelope(message_type: MessageType, params: Mapping[str, Any]) -> Dict[str, Content]:
    """Validate params for message_type and wrap the content for the API."""
    return {"content": CONTENT_BUILDERS[MessageType(message_type)](params)}
