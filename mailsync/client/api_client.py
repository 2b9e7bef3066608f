"""
HTTP client for the mailsync API.
"""

import asyncio
import logging
from types import TracebackType
from typing import Any

import aiohttp
from pydantic import BaseModel

from mailsync.api.payloads.messages import AckResponse, MessageListResponse
from mailsync.constants.emails import Mailbox
from mailsync.controllers.email.message import AttachmentData
from mailsync.exceptions import BackendRequestError
from settings import settings


class MailboxApiClient:
    """One aiohttp session per client; responses are validated with the API payload models."""

    def __init__(self, backend_url: str | None = None, timeout: int | None = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._backend_url = (backend_url or settings.client.backend_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.client.request_timeout
        self._http_session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def __aenter__(self) -> "MailboxApiClient":
        await self.init_session()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        await self.close_session()

    async def init_session(self) -> None:
        async with self._session_lock:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))

    async def close_session(self) -> None:
        if self._http_session:
            await self._http_session.close()
            self._http_session = None

    async def list_messages(self, account_id: str, page: int = 1, limit: int = 20, search: str = "") -> MessageListResponse:
        params: dict[str, Any] = {"email_account_id": account_id, "page": page, "limit": limit}
        if search:
            params["search"] = search
        return await self._request("GET", "/api/emails", MessageListResponse, params=params)

    async def mark_read(self, account_id: str, mailbox: Mailbox | str, uid: int) -> AckResponse:
        payload = {"email_account_id": account_id, "mailbox": _mailbox_value(mailbox), "uid": uid}
        return await self._request("POST", "/api/emails/read", AckResponse, json=payload)

    async def delete_message(self, account_id: str, mailbox: Mailbox | str, uid: int) -> AckResponse:
        payload = {"email_account_id": account_id, "mailbox": _mailbox_value(mailbox), "uid": uid}
        return await self._request("POST", "/api/emails/delete", AckResponse, json=payload)

    async def reply(
        self, account_id: str, message_uid: int, to_email: str, subject: str | None, body: str
    ) -> AckResponse:
        payload = {
            "email_account_id": account_id,
            "message_uid": message_uid,
            "to_email": to_email,
            "subject": subject,
            "body": body,
        }
        return await self._request("POST", "/api/emails/reply", AckResponse, json=payload)

    async def send_email(
        self,
        account_id: str,
        to_email: str,
        subject: str,
        body: str,
        attachments: list[AttachmentData] | None = None,
    ) -> AckResponse:
        form = aiohttp.FormData()
        form.add_field("email_account_id", account_id)
        form.add_field("to_email", to_email)
        form.add_field("subject", subject)
        form.add_field("body", body)
        for attachment in attachments or []:
            form.add_field(
                "attachments",
                attachment.data,
                filename=attachment.filename,
                content_type=attachment.content_type or "application/octet-stream",
            )
        return await self._request("POST", "/api/emails/send", AckResponse, data=form)

    async def get_attachment(
        self, account_id: str, uid: int, part: str, mailbox: Mailbox | str = Mailbox.inbox
    ) -> bytes:
        params = {"email_account_id": account_id, "uid": uid, "part": part, "mailbox": _mailbox_value(mailbox)}
        async with self._session().get(f"{self._backend_url}/api/emails/attachment", params=params) as response:
            await self._raise_for_status(response)
            return await response.read()

    async def _request(self, method: str, path: str, model: type[Any], **kwargs: Any) -> Any:
        async with self._session().request(method, f"{self._backend_url}{path}", **kwargs) as response:
            await self._raise_for_status(response)
            body = await response.json()

        result: BaseModel = model.model_validate(body)
        return result

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if response.status < 400:
            return

        description = response.reason or "Request failed"
        try:
            body = await response.json(content_type=None)
            if isinstance(body, dict):
                description = body.get("error_description") or body.get("error") or description
        except ValueError:
            pass

        self._logger.warning(f"{response.method} {response.url.path} failed with status {response.status}: {description}")
        raise BackendRequestError(str(description), action=f"{response.method} {response.url.path}")

    def _session(self) -> aiohttp.ClientSession:
        if self._http_session is None:
            raise RuntimeError("HTTP session is not initialized; use the client as an async context manager")
        return self._http_session


def _mailbox_value(mailbox: Mailbox | str) -> str:
    return mailbox.value if isinstance(mailbox, Mailbox) else mailbox
