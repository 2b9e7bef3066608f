from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from dependency_injector import providers
from fastapi import FastAPI
from fastapi.testclient import TestClient

from mailsync.api.payloads import (
    AccountSyncResult,
    AckResponse,
    Message,
    MessageAttachment,
    MessageListResponse,
    Pagination,
    SyncResponse,
)
from mailsync.constants.emails import Mailbox
from mailsync.container import get_wire_container
from mailsync.create_app import include_routes, setup_error_handlers
from mailsync.exceptions import AccountNotFoundError, MailboxConnectionError


@pytest.fixture
def email_controller():
    return Mock(
        list_messages=AsyncMock(),
        mark_read=AsyncMock(return_value=AckResponse()),
        delete=AsyncMock(return_value=AckResponse()),
        reply=AsyncMock(return_value=AckResponse(message_id="<r@example.com>")),
        send=AsyncMock(return_value=AckResponse(message_id="<s@example.com>")),
        get_attachment=AsyncMock(),
        sync_all=AsyncMock(),
    )


@pytest.fixture
def account_controller(account):
    return Mock(
        list_accounts=AsyncMock(return_value=[account]),
        create_account=AsyncMock(return_value=account),
        update_account=AsyncMock(return_value=account),
        delete_account=AsyncMock(return_value=None),
    )


@pytest.fixture
def client(email_controller, account_controller):
    container = get_wire_container()
    container.controllers.email_controller.override(providers.Object(email_controller))
    container.controllers.account_controller.override(providers.Object(account_controller))

    app = FastAPI()
    setup_error_handlers(app)
    include_routes(app)

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    container.unwire()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_emails_uses_wire_aliases(client, email_controller):
    email_controller.list_messages.return_value = MessageListResponse(
        data=[
            Message(
                uid=3,
                mailbox=Mailbox.sent,
                from_="team@example.com",
                subject="Hi",
                date=datetime(2024, 1, 1, tzinfo=timezone.utc),
                is_read=True,
                attachments=[MessageAttachment(part="2", filename="a.pdf", mime_type="application/pdf", size=3)],
            )
        ],
        pagination=Pagination(page=2, limit=10, total=11, has_more=False),
    )

    response = client.get("/api/emails", params={"email_account_id": "acc", "page": 2, "limit": 10, "search": "hi"})

    assert response.status_code == 200
    body = response.json()
    assert body["data"][0]["from"] == "team@example.com"
    assert body["data"][0]["mailbox"] == "sent"
    assert body["data"][0]["attachments"][0]["mimeType"] == "application/pdf"
    assert body["pagination"]["hasMore"] is False
    email_controller.list_messages.assert_awaited_once_with("acc", page=2, limit=10, search="hi")


@pytest.mark.parametrize("params", [{"limit": 101}, {"page": 0}, {"limit": 0}])
def test_list_emails_rejects_out_of_range_paging(client, params):
    response = client.get("/api/emails", params={"email_account_id": "acc", **params})

    assert response.status_code == 422


def test_unknown_account_is_404(client, email_controller):
    email_controller.list_messages.side_effect = AccountNotFoundError("acc")

    response = client.get("/api/emails", params={"email_account_id": "acc"})

    assert response.status_code == 404
    assert response.json() == {"error": "entity_not_found", "error_description": "Email account not found"}


def test_mail_server_failure_is_502(client, email_controller):
    email_controller.list_messages.side_effect = MailboxConnectionError("Could not connect to imap.example.com")

    response = client.get("/api/emails", params={"email_account_id": "acc"})

    assert response.status_code == 502
    assert response.json()["error_description"] == "Could not connect to imap.example.com"


def test_unexpected_error_is_500(client, email_controller):
    email_controller.list_messages.side_effect = RuntimeError("boom")

    response = client.get("/api/emails", params={"email_account_id": "acc"})

    assert response.status_code == 500
    assert response.json() == {"error": "unhandled_exception"}


def test_mark_read_and_delete(client, email_controller):
    payload = {"email_account_id": "acc", "uid": 4, "mailbox": "sent"}

    assert client.post("/api/emails/read", json=payload).json()["success"] is True
    assert client.post("/api/emails/delete", json={"email_account_id": "acc", "uid": 5}).status_code == 200

    email_controller.mark_read.assert_awaited_once_with("acc", "sent", 4)
    email_controller.delete.assert_awaited_once_with("acc", "inbox", 5)


def test_reply_returns_message_id(client, email_controller):
    response = client.post(
        "/api/emails/reply",
        json={"email_account_id": "acc", "message_uid": 7, "to_email": "a@example.com", "body": "Hi"},
    )

    assert response.json() == {"success": True, "messageId": "<r@example.com>"}
    assert email_controller.reply.await_args.args[0].message_uid == 7


def test_send_accepts_multipart_attachments(client, email_controller):
    response = client.post(
        "/api/emails/send",
        data={"email_account_id": "acc", "to_email": "b@example.com", "subject": "Files", "body": "See attached"},
        files=[
            ("attachments", ("a.txt", b"first", "text/plain")),
            ("attachments", ("b.csv", b"x,y", "text/csv")),
        ],
    )

    assert response.status_code == 200
    args = email_controller.send.await_args
    assert args.args == ("acc", "b@example.com", "Files", "See attached")
    assert [(item.filename, item.data, item.content_type) for item in args.kwargs["attachments"]] == [
        ("a.txt", b"first", "text/plain"),
        ("b.csv", b"x,y", "text/csv"),
    ]


def test_send_without_attachments(client, email_controller):
    response = client.post("/api/emails/send", data={"email_account_id": "acc", "to_email": "b@example.com"})

    assert response.status_code == 200
    assert email_controller.send.await_args.kwargs["attachments"] == []


def test_attachment_download(client, email_controller):
    email_controller.get_attachment.return_value = (
        MessageAttachment(part="2", filename="report final.pdf", mime_type="application/pdf", size=4),
        b"%PDF",
    )

    response = client.get("/api/emails/attachment", params={"email_account_id": "acc", "uid": 3, "part": "2"})

    assert response.content == b"%PDF"
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == "attachment; filename*=UTF-8''report%20final.pdf"
    email_controller.get_attachment.assert_awaited_once_with("acc", "inbox", 3, "2")


def test_attachment_download_honours_requested_type(client, email_controller):
    email_controller.get_attachment.return_value = (
        MessageAttachment(part="2", filename="a.bin", mime_type="application/octet-stream", size=1),
        b"x",
    )

    response = client.get(
        "/api/emails/attachment",
        params={"email_account_id": "acc", "uid": 3, "part": "2", "mimeType": "text/plain", "filename": "a.txt"},
    )

    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"].endswith("a.txt")


def test_sync(client, email_controller):
    email_controller.sync_all.return_value = SyncResponse(
        results=[AccountSyncResult(email_account_id="acc", email="team@example.com", count=3)]
    )

    response = client.post("/api/emails/sync")

    assert response.json()["results"][0]["count"] == 3


def test_list_accounts_never_exposes_password(client, account):
    response = client.get("/api/email-accounts")

    [item] = response.json()["data"]
    assert item["id"] == str(account.uuid)
    assert "password" not in item


def test_create_account(client, account_controller):
    response = client.post(
        "/api/email-accounts",
        json={"email": "new@example.com", "password": "pw", "imap_host": "imap.example.com", "smtp_host": "smtp.example.com"},
    )

    assert response.status_code == 201
    assert account_controller.create_account.await_args.args[0].password == "pw"


def test_delete_account(client, account_controller, account):
    response = client.delete(f"/api/email-accounts/{account.uuid}")

    assert response.status_code == 204
    account_controller.delete_account.assert_awaited_once_with(str(account.uuid))
