"""
Message dispatch: one coroutine per content type.

Every function shares the same protocol: resolve the target (userId wins
over channelId), validate and build the content, then POST the envelope to
/bots/{bot_id}/{users|channels}/{id}/messages. Failures propagate; nothing
is retried.
"""

from __future__ import annotations

from typing import Any, Mapping

from works_gateway.messaging.application.content_builders import build_envelope
from works_gateway.messaging.domain.value_objects import MessageType, Target
from works_gateway.messaging.infrastructure.works_api import WorksApiClient


async def dispatch_message(
    message_type: MessageType,
    bot_id: str,
    token: str,
    params: Mapping[str, Any],
    *,
    api: WorksApiClient,
) -> None:
    target = Target.from_params(params)
    envelope = build_envelope(message_type, params)
    await api.send_message(bot_id=bot_id, destination=target.path, access_token=token, payload=envelope)


async def send_text_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.TEXT, bot_id, token, params, api=api)


async def send_sticker_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.STICKER, bot_id, token, params, api=api)


async def send_image_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.IMAGE, bot_id, token, params, api=api)


async def send_file_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.FILE, bot_id, token, params, api=api)


async def send_link_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.LINK, bot_id, token, params, api=api)


async def send_button_template_message(
    bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient
) -> None:
    await dispatch_message(MessageType.BUTTON_TEMPLATE, bot_id, token, params, api=api)


async def send_list_template_message(
    bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient
) -> None:
    await dispatch_message(MessageType.LIST_TEMPLATE, bot_id, token, params, api=api)


async def send_carousel_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.CAROUSEL, bot_id, token, params, api=api)


async def send_image_carousel_message(
    bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient
) -> None:
    await dispatch_message(MessageType.IMAGE_CAROUSEL, bot_id, token, params, api=api)


async def send_flex_message(bot_id: str, token: str, params: Mapping[str, Any], *, api: WorksApiClient) -> None:
    await dispatch_message(MessageType.FLEX, bot_id, token, params, api=api)


SENDERS = {
    MessageType.TEXT: send_text_message,
    MessageType.STICKER: send_sticker_message,
    MessageType.IMAGE: send_image_message,
    MessageType.FILE: send_file_message,
    MessageType.LINK: send_link_message,
    MessageType.BUTTON_TEMPLATE: send_button_template_message,
    MessageType.LIST_TEMPLATE: send_list_template_message,
    MessageType.CAROUSEL: send_carousel_message,
    MessageType.IMAGE_CAROUSEL: send_image_carousel_message,
    MessageType.FLEX: send_flex_message,
}
