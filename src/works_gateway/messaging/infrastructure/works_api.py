from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httpx

from works_gateway.shared.exceptions import NotFoundError, TransferError, UpstreamError
from works_gateway.shared.logging import get_logger

logger = get_logger(__name__)


def _upstream_message(response: httpx.Response) -> str:
    """Best-effort extraction of the Bot API error description."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("description") or body.get("message") or body.get("code") or body)
    return str(body)


class WorksApiClient:
    """
    Minimal client wrapper for the LINE WORKS Bot API (v1.0).
    - Messages: POST /bots/{botId}/{users|channels}/{id}/messages
    - Attachments: POST/GET /bots/{botId}/attachments[/{fileId}]
    - The access token is passed per call and never logged.
    """

    def __init__(self, *, http_client: httpx.AsyncClient, base_url: str, bot_id: str) -> None:
        self._http = http_client
        self._base = base_url.rstrip("/")
        self._bot_id = bot_id

    @property
    def bot_id(self) -> str:
        return self._bot_id

    def bot_url(self, path: str, bot_id: Optional[str] = None) -> str:
        return f"{self._base}/bots/{bot_id or self._bot_id}/{path.lstrip('/')}"

    @staticmethod
    def _auth(access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    async def send_message(
        self,
        *,
        bot_id: str,
        destination: str,
        access_token: str,
        payload: Dict[str, Any],
    ) -> None:
        """
        POST /bots/{bot_id}/{destination}
        payload example (text):
        {"content": {"type": "text", "text": "hello"}}
        """
        url = self.bot_url(destination, bot_id)
        try:
            r = await self._http.post(url, headers=self._auth(access_token), json=payload)
        except httpx.HTTPError as e:
            logger.error("message_send_failed", url=url, error=str(e))
            raise UpstreamError(f"Failed to send message: {e}") from e

        if r.is_error:
            message = _upstream_message(r)
            logger.error("message_send_rejected", url=url, status=r.status_code, upstream=message)
            raise UpstreamError(
                f"Failed to send message (status {r.status_code}): {message}",
                details={"upstream_status": r.status_code, "upstream_message": message},
            )
        logger.info("message_sent", url=url, status=r.status_code)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------
    async def create_attachment(self, *, access_token: str, file_name: str) -> Dict[str, str]:
        """Register a file name and receive {uploadUrl, fileId}."""
        r = await self._http.post(
            self.bot_url("attachments"),
            headers=self._auth(access_token),
            json={"fileName": file_name},
        )
        r.raise_for_status()
        data = r.json()
        if not isinstance(data, dict) or not data.get("uploadUrl") or not data.get("fileId"):
            raise TransferError("Attachment registration returned no uploadUrl/fileId.")
        return data

    async def upload_content(
        self,
        *,
        upload_url: str,
        access_token: str,
        file_path: Path,
        file_name: str,
        file_type: Optional[str],
    ) -> None:
        """Multipart POST of a local file, read from disk in chunks."""
        with open(file_path, "rb") as fh:
            r = await self._http.post(
                upload_url,
                headers=self._auth(access_token),
                data={"resourceName": file_name},
                files={"file": (file_name, fh, file_type or "application/octet-stream")},
            )
        r.raise_for_status()

    async def resolve_download(self, *, access_token: str, file_id: str) -> Dict[str, Any]:
        """
        GET /attachments/{file_id} without following redirects.
        3xx -> {"downloadUrl": Location}; 2xx -> JSON body.
        """
        url = self.bot_url(f"attachments/{file_id}")
        try:
            r = await self._http.get(url, headers=self._auth(access_token), follow_redirects=False)
        except httpx.HTTPError as e:
            raise TransferError(f"Failed to resolve the download URL: {e}") from e

        if r.is_redirect and r.headers.get("location"):
            return {"downloadUrl": r.headers["location"]}
        if r.status_code == 404:
            raise NotFoundError(f"Attachment '{file_id}' was not found.", details={"fileId": file_id})
        if r.is_error or r.is_redirect:
            raise TransferError(
                f"Failed to resolve the download URL (status {r.status_code}).",
                details={"upstream_status": r.status_code},
            )
        try:
            body = r.json()
        except ValueError as e:
            raise TransferError("Download endpoint returned neither a redirect nor a JSON body.") from e
        return body if isinstance(body, dict) else {}

    async def open_download(self, *, download_url: str, access_token: str) -> httpx.Response:
        """Start a streamed GET; the caller must aclose() the response."""
        request = self._http.build_request("GET", download_url, headers=self._auth(access_token))
        try:
            response = await self._http.send(request, stream=True, follow_redirects=True)
        except httpx.HTTPError as e:
            raise TransferError(f"Failed to download the file: {e}") from e
        if response.is_error:
            await response.aclose()
            if response.status_code == 404:
                raise NotFoundError("The file was not found at the download URL.")
            raise TransferError(
                f"Failed to download the file (status {response.status_code}).",
                details={"upstream_status": response.status_code},
            )
        return response
