import os

os.environ["MAILSYNC_ENV"] = "test"

import pytest  # noqa: E402

from mailsync.models import EmailAccount  # noqa: E402
from tests.factories import FakeAccountRepo, FakeReplyRepo, make_account  # noqa: E402


@pytest.fixture
def account() -> EmailAccount:
    return make_account()


@pytest.fixture
def account_repo(account: EmailAccount) -> FakeAccountRepo:
    return FakeAccountRepo([account])


@pytest.fixture
def reply_repo() -> FakeReplyRepo:
    return FakeReplyRepo()
