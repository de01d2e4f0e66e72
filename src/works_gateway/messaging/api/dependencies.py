from __future__ import annotations

from fastapi import Request

from works_gateway.messaging.application.services.message_service import MessageService


def get_message_service(request: Request) -> MessageService:
    return request.app.state.message_service
