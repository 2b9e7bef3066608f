from cryptography.fernet import Fernet, InvalidToken

from mailsync.exceptions import AccountConfigurationError
from settings import settings

cipher_suite = Fernet(settings.password_encryption_key.encode())


class PasswordUtils:
    """Encrypts mailbox credentials at rest."""

    @staticmethod
    def encrypt_password(password: str) -> str:
        """Encrypt a password"""
        return cipher_suite.encrypt(password.encode()).decode()

    @staticmethod
    def decrypt_password(password: str) -> str:
        """Decrypt a stored password; a value that is not a valid token means the account is misconfigured."""
        try:
            return cipher_suite.decrypt(password.encode()).decode()
        except InvalidToken as e:
            raise AccountConfigurationError("Stored account credential cannot be decrypted") from e
