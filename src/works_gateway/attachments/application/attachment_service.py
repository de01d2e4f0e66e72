from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, BinaryIO, Dict, Optional

import httpx

from works_gateway.identity.application.credential_provider import CredentialProvider
from works_gateway.messaging.infrastructure.works_api import WorksApiClient
from works_gateway.shared.exceptions import DomainError, TransferError
from works_gateway.shared.logging import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StagedFile:
    """A caller upload written to the local upload directory."""

    filename: str
    mimetype: Optional[str]
    size: int
    path: Path

    def as_dict(self) -> Dict[str, Any]:
        return {"filename": self.filename, "mimetype": self.mimetype, "size": self.size, "path": str(self.path)}


@dataclass
class DownloadStream:
    """Upstream streamed response plus the headers to relay."""

    response: httpx.Response
    content_type: str
    content_disposition: str

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        async for chunk in self.response.aiter_bytes():
            yield chunk

    async def aclose(self) -> None:
        await self.response.aclose()


class AttachmentService:
    """Two-phase upload and redirect-based download through the Bot API."""

    def __init__(
        self,
        *,
        api: WorksApiClient,
        credentials: CredentialProvider,
        upload_dir: str | os.PathLike,
    ) -> None:
        self._api = api
        self._credentials = credentials
        self._upload_dir = Path(upload_dir)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------
    def stage(self, source: BinaryIO, filename: str, mimetype: Optional[str]) -> StagedFile:
        """Copy an incoming upload to `{epoch_ms}-{basename}` in the upload dir."""
        self._upload_dir.mkdir(parents=True, exist_ok=True)
        safe_name = Path(filename).name or "upload"
        path = self._upload_dir / f"{int(time.time() * 1000)}-{safe_name}"
        size = 0
        try:
            with open(path, "wb") as out:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    out.write(chunk)
                    size += len(chunk)
        except BaseException:
            # No partial file is left behind
            self._discard(path)
            raise
        return StagedFile(filename=safe_name, mimetype=mimetype, size=size, path=path)

    async def upload(self, token: str, file_path: Path, file_name: str, file_type: Optional[str]) -> Dict[str, str]:
        """
        Register the file name, POST the content to the returned uploadUrl
        and return {"fileId": ...}. The local file is removed on every path.
        """
        try:
            registration = await self._api.create_attachment(access_token=token, file_name=file_name)
            await self._api.upload_content(
                upload_url=registration["uploadUrl"],
                access_token=token,
                file_path=file_path,
                file_name=file_name,
                file_type=file_type,
            )
            logger.info("attachment_uploaded", file_id=registration["fileId"], file_name=file_name)
            return {"fileId": registration["fileId"]}
        except DomainError:
            raise
        except (httpx.HTTPError, OSError, ValueError) as e:
            logger.error("attachment_upload_failed", file_name=file_name, error=str(e))
            raise TransferError(f"Failed to upload the file: {e}") from e
        finally:
            self._discard(file_path)

    async def upload_staged(self, staged: StagedFile) -> Dict[str, str]:
        """Mint a token and upload; the staged file is removed on every path."""
        try:
            token = await self._credentials.get_access_token()
        except BaseException:
            # Includes cancellation when the client disconnects
            self._discard(staged.path)
            raise
        return await self.upload(token, staged.path, staged.filename, staged.mimetype)

    @staticmethod
    def _discard(file_path: Path) -> None:
        try:
            Path(file_path).unlink(missing_ok=True)
        except OSError as e:
            logger.error("temp_file_delete_failed", path=str(file_path), error=str(e))

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------
    async def resolve_download(self, token: str, file_id: str) -> Dict[str, Any]:
        return await self._api.resolve_download(access_token=token, file_id=file_id)

    async def stream_download(self, download_url: str, token: str, *, file_id: str) -> DownloadStream:
        response = await self._api.open_download(download_url=download_url, access_token=token)
        return DownloadStream(
            response=response,
            content_type=response.headers.get("content-type", "application/octet-stream"),
            content_disposition=response.headers.get("content-disposition")
            or f'attachment; filename="{file_id}"',
        )

    async def download(self, file_id: str) -> DownloadStream:
        token = await self._credentials.get_access_token()
        resolved = await self.resolve_download(token, file_id)
        download_url = resolved.get("downloadUrl")
        if not download_url:
            raise TransferError("Could not obtain a download URL.", details={"fileId": file_id})
        return await self.stream_download(download_url, token, file_id=file_id)
