from dependency_injector import containers, providers

from mailsync.repos.account import EmailAccountRepo
from mailsync.repos.reply import EmailReplyRepo


class RepoContainer(containers.DeclarativeContainer):
    account = providers.Singleton(EmailAccountRepo)
    reply = providers.Singleton(EmailReplyRepo)
