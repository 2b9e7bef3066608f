import aiosmtplib
import pytest

from mailsync.constants.emails import FLAG_SEEN, INBOX_FOLDER
from mailsync.controllers.email.message import AttachmentData
from mailsync.controllers.smtp.smtp_controller import SMTPController
from mailsync.exceptions import SMTPSendError
from settings import settings
from tests.factories import FakeConnectionManager, FakeImapSession, make_account


class FakeSMTP:
    instances: list["FakeSMTP"] = []
    fail_with: Exception | None = None

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.logged_in: tuple[str, str] | None = None
        self.sent: list[tuple[object, str, list[str]]] = []
        FakeSMTP.instances.append(self)

    async def __aenter__(self):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        return self

    async def __aexit__(self, *args):
        return None

    async def login(self, username, password):
        self.logged_in = (username, password)

    async def send_message(self, message, sender, recipients):
        self.sent.append((message, sender, recipients))


@pytest.fixture(autouse=True)
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(aiosmtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def session():
    return FakeImapSession({INBOX_FOLDER: [], "Sent": []})


@pytest.fixture
def controller(session):
    return SMTPController(FakeConnectionManager(session))


def test_plain_message_headers(controller):
    message = controller.create_message(make_account(), "bob@example.com", "Hi", "Body text")

    assert message["From"] == "team@example.com"
    assert message["To"] == "bob@example.com"
    assert message["Subject"] == "Hi"
    assert message["Message-ID"].endswith("@example.com>")
    assert message.get_content_type() == "text/plain"
    assert "In-Reply-To" not in message


def test_reply_threading_headers(controller):
    message = controller.create_message(
        make_account(), "bob@example.com", "Re: Hi", "ok", in_reply_to="<orig@example.com>", references="<root@example.com>"
    )

    assert message["In-Reply-To"] == "<orig@example.com>"
    assert message["References"] == "<root@example.com> <orig@example.com>"


def test_attachments_make_a_mixed_message(controller):
    message = controller.create_message(
        make_account(),
        "bob@example.com",
        "Files",
        "See attached",
        attachments=[AttachmentData(filename="a.csv", data=b"x,y", content_type="text/csv")],
    )

    parts = message.get_payload()
    assert message.get_content_type() == "multipart/mixed"
    assert parts[0].get_content_type() == "text/plain"
    assert parts[1].get_filename() == "a.csv"
    assert parts[1].get_content_type() == "text/csv"
    assert parts[1].get_payload(decode=True) == b"x,y"


async def test_send_email_logs_in_and_delivers(controller, fake_smtp, session):
    result = await controller.send_email(make_account(), "bob@example.com", "Hi", "Body")

    [smtp] = fake_smtp.instances
    assert smtp.kwargs["hostname"] == "smtp.example.com"
    assert smtp.kwargs["use_tls"] is True
    assert smtp.logged_in == ("team@example.com", "secret")
    assert smtp.sent[0][2] == ["bob@example.com"]
    assert result.message_id == smtp.sent[0][0]["Message-ID"]
    assert result.folder is None
    assert session.appended == []


async def test_send_failure_raises(controller, fake_smtp):
    fake_smtp.fail_with = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")

    with pytest.raises(SMTPSendError):
        await controller.send_email(make_account(), "bob@example.com", "Hi", "Body")


async def test_unreachable_server_raises(controller, fake_smtp):
    fake_smtp.fail_with = OSError("unreachable")

    with pytest.raises(SMTPSendError):
        await controller.send_email(make_account(), "bob@example.com", "Hi", "Body")


async def test_copy_is_saved_to_sent_when_enabled(controller, session, monkeypatch):
    monkeypatch.setattr(settings.smtp, "save_to_sent", True)

    result = await controller.send_email(make_account(), "bob@example.com", "Hi", "Body")

    assert result.folder == "Sent"
    [(payload, folder, flags)] = session.appended
    assert folder == "Sent"
    assert flags == f"({FLAG_SEEN})"
    assert b"\r\n" in payload


async def test_missing_sent_folder_does_not_fail_the_send(monkeypatch):
    monkeypatch.setattr(settings.smtp, "save_to_sent", True)
    controller = SMTPController(FakeConnectionManager(FakeImapSession({INBOX_FOLDER: []})))

    result = await controller.send_email(make_account(), "bob@example.com", "Hi", "Body")

    assert result.folder is None
