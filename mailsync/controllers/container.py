from typing import cast

from dependency_injector import containers, providers

from mailsync.controllers.account.account_controller import AccountController
from mailsync.controllers.email.email_controller import EmailController
from mailsync.controllers.imap.connection import ConnectionManager
from mailsync.controllers.imap.mailbox_fetcher import MailboxFetcher
from mailsync.controllers.smtp.smtp_controller import SMTPController
from mailsync.repos.container import RepoContainer


class ControllerContainer(containers.DeclarativeContainer):
    repos: RepoContainer = cast(RepoContainer, providers.DependenciesContainer())

    imap_connection_manager = providers.Singleton(ConnectionManager)
    mailbox_fetcher = providers.Singleton(
        MailboxFetcher,
        account_repo=repos.account,
        reply_repo=repos.reply,
        connection_manager=imap_connection_manager,
    )

    smtp_controller = providers.Singleton(SMTPController, connection_manager=imap_connection_manager)

    email_controller = providers.Singleton(
        EmailController,
        account_repo=repos.account,
        reply_repo=repos.reply,
        mailbox_fetcher=mailbox_fetcher,
        smtp_controller=smtp_controller,
    )

    account_controller = providers.Singleton(AccountController, account_repo=repos.account)
