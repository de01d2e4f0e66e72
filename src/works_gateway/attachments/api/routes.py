from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from works_gateway.attachments.application.attachment_service import AttachmentService
from works_gateway.shared.exceptions import ValidationError

router = APIRouter(prefix="/attachments", tags=["Attachments"])


def get_attachment_service(request: Request) -> AttachmentService:
    return request.app.state.attachment_service


@router.post("")
async def upload_attachment(
    request: Request,
    file: Optional[UploadFile] = File(default=None),
    service: AttachmentService = Depends(get_attachment_service),
):
    """Upload a file; returns {fileId} (or the staged file details in staging mode)."""
    if file is None or not file.filename:
        raise ValidationError("No file was uploaded (multipart field 'file').", details={"field": "file"})

    try:
        staged = await run_in_threadpool(service.stage, file.file, file.filename, file.content_type)
    finally:
        await file.close()

    if request.app.state.settings.ATTACHMENT_STAGING_ONLY:
        return staged.as_dict()
    return await service.upload_staged(staged)


@router.get("/{file_id}")
async def download_attachment(
    file_id: str,
    service: AttachmentService = Depends(get_attachment_service),
) -> StreamingResponse:
    """Stream the attachment bytes, relaying Content-Type and Content-Disposition."""
    stream = await service.download(file_id)
    return StreamingResponse(
        stream.iter_bytes(),
        status_code=stream.response.status_code,
        media_type=stream.content_type,
        headers={"Content-Disposition": stream.content_disposition},
        background=BackgroundTask(stream.aclose),
    )
