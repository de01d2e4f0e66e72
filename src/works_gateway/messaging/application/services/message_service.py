from __future__ import annotations

from typing import Any, Dict, Mapping

from works_gateway.identity.application.credential_provider import CredentialProvider
from works_gateway.messaging.application.content_builders import build_envelope
from works_gateway.messaging.application.dispatch import SENDERS
from works_gateway.messaging.domain.value_objects import MessageType, Target
from works_gateway.messaging.infrastructure.works_api import WorksApiClient
from works_gateway.shared.logging import get_logger

logger = get_logger(__name__)


class MessageService:
    """
    Entry point used by the HTTP layer.

    The payload is validated before a token is requested, so a rejected
    payload never causes an outbound call (token exchange included).
    """

    def __init__(self, *, api: WorksApiClient, credentials: CredentialProvider, bot_id: str) -> None:
        self._api = api
        self._credentials = credentials
        self._bot_id = bot_id

    async def send(self, message_type: MessageType, target: Target, body: Mapping[str, Any]) -> None:
        # Path parameters decide the target; body copies of userId/channelId are ignored
        params: Dict[str, Any] = {k: v for k, v in body.items() if k not in ("userId", "channelId")}
        params.update(target.as_params())

        build_envelope(message_type, params)
        token = await self._credentials.get_access_token()

        logger.info("message_dispatch", message_type=message_type.value, target=target.kind.value)
        await SENDERS[message_type](self._bot_id, token, params, api=self._api)
