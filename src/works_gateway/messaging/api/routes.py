from __future__ import annotations

from typing import Any, Mapping

from fastapi import APIRouter, Body, Depends, Response, status

from works_gateway.messaging.api.dependencies import get_message_service
from works_gateway.messaging.application.services.message_service import MessageService
from works_gateway.messaging.domain.value_objects import MessageType, Target
from works_gateway.shared.exceptions import NotFoundError, ValidationError

router = APIRouter(tags=["Messaging: Messages"])

MESSAGE_TYPES = ", ".join(t.value for t in MessageType)


def _message_type(value: str) -> MessageType:
    try:
        return MessageType(value)
    except ValueError:
        raise NotFoundError(
            f"Unknown message type '{value}'.",
            details={"allowed": [t.value for t in MessageType]},
        ) from None


def _body(payload: Any) -> Mapping[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object.")
    return payload


@router.post(
    "/channels/{channel_id}/messages/type/{message_type}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary=f"Send a message to a channel ({MESSAGE_TYPES})",
)
async def send_channel_message(
    channel_id: str,
    message_type: str,
    payload: Any = Body(default=None),
    service: MessageService = Depends(get_message_service),
) -> Response:
    await service.send(_message_type(message_type), Target.channel(channel_id), _body(payload))
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/users/{user_id}/messages/type/{message_type}",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary=f"Send a message to a user ({MESSAGE_TYPES})",
)
async def send_user_message(
    user_id: str,
    message_type: str,
    payload: Any = Body(default=None),
    service: MessageService = Depends(get_message_service),
) -> Response:
    await service.send(_message_type(message_type), Target.user(user_id), _body(payload))
    return Response(status_code=status.HTTP_200_OK)
