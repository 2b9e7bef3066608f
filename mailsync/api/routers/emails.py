"""
Email API router.

Errors raised by controllers are rendered by the application exception
handlers, so routes only translate between HTTP and controller calls.
"""

import logging
from urllib.parse import quote

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from mailsync.api.payloads import (
    AckResponse,
    DeleteMessageRequest,
    MarkReadRequest,
    MessageListResponse,
    ReplyRequest,
    SyncResponse,
)
from mailsync.api.payloads.error import APIError
from mailsync.constants.emails import Mailbox
from mailsync.container import ApplicationContainer
from mailsync.controllers.email.email_controller import EmailController
from mailsync.controllers.email.message import AttachmentData
from settings import settings

logger = logging.getLogger(__name__)
router = APIRouter()

_ERRORS = {
    400: {"model": APIError, "description": "Invalid account configuration"},
    404: {"model": APIError, "description": "Account or message not found"},
    502: {"model": APIError, "description": "Mail server unavailable"},
}


@router.get(
    "",
    response_model=MessageListResponse,
    responses=_ERRORS,
    summary="List messages",
    description="Fetches INBOX and Sent of an account and returns one page of the merged, newest-first list",
)
@inject
async def list_emails(
    email_account_id: str = Query(..., description="Public identifier of the account"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.api.default_page_limit, ge=1, le=settings.api.max_page_limit),
    search: str | None = Query(None, description="Case-insensitive match on sender, subject and body"),
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> MessageListResponse:
    return await email_controller.list_messages(email_account_id, page=page, limit=limit, search=search)


@router.post("/read", response_model=AckResponse, responses=_ERRORS, summary="Mark a message as read")
@inject
async def mark_read(
    request: MarkReadRequest,
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> AckResponse:
    return await email_controller.mark_read(request.email_account_id, request.mailbox, request.uid)


@router.post("/delete", response_model=AckResponse, responses=_ERRORS, summary="Delete a message")
@inject
async def delete_email(
    request: DeleteMessageRequest,
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> AckResponse:
    return await email_controller.delete(request.email_account_id, request.mailbox, request.uid)


@router.post("/reply", response_model=AckResponse, responses=_ERRORS, summary="Reply to a message")
@inject
async def reply(
    request: ReplyRequest,
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> AckResponse:
    return await email_controller.reply(request)


@router.post(
    "/send",
    response_model=AckResponse,
    responses=_ERRORS,
    summary="Send a message",
    description="Sends a new message; accepts multipart form data so files can be attached",
)
@inject
async def send_email(
    email_account_id: str = Form(...),
    to_email: str = Form(...),
    subject: str | None = Form(None),
    body: str = Form(""),
    attachments: list[UploadFile] | None = File(None),
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> AckResponse:
    files = [
        AttachmentData(filename=upload.filename or "attachment", data=await upload.read(), content_type=upload.content_type)
        for upload in attachments or []
    ]
    return await email_controller.send(email_account_id, to_email, subject, body, attachments=files)


@router.get("/attachment", responses=_ERRORS, summary="Download an attachment")
@inject
async def get_attachment(
    email_account_id: str = Query(...),
    uid: int = Query(...),
    part: str = Query(..., description="IMAP body section of the attachment"),
    filename: str | None = Query(None),
    mime_type: str | None = Query(None, alias="mimeType"),
    mailbox: str = Query(Mailbox.inbox.value),
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> Response:
    descriptor, content = await email_controller.get_attachment(email_account_id, mailbox, uid, part)
    download_name = filename or descriptor.filename
    return Response(
        content=content,
        media_type=mime_type or descriptor.mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(download_name)}"},
    )


@router.post(
    "/sync",
    response_model=SyncResponse,
    summary="Synchronize all accounts",
    description="Fetches every sync-enabled account once and reports a count or an error per account",
)
@inject
async def sync_all(
    email_controller: EmailController = Depends(Provide[ApplicationContainer.controllers.email_controller]),
) -> SyncResponse:
    return await email_controller.sync_all()
