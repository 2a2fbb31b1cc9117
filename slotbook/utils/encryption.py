# ===== slotbook/utils/encryption.py =====
from typing import Optional

from cryptography.fernet import Fernet

from slotbook.config.settings import Settings


# Generate a key once and store it in CALENDAR_ENCRYPTION_KEY:
#   Fernet.generate_key().decode()


class TokenCipher:
    """Encrypts OAuth tokens before they are written to the database"""

    def __init__(self, settings: Settings):
        if not settings.CALENDAR_ENCRYPTION_KEY:
            raise ValueError("CALENDAR_ENCRYPTION_KEY is not set")
        self.fernet = Fernet(settings.CALENDAR_ENCRYPTION_KEY.encode())

    def encrypt(self, token: Optional[str]) -> Optional[bytes]:
        """Encrypt a token string"""
        if not token:
            return None
        return self.fernet.encrypt(token.encode())

    def decrypt(self, encrypted_token: Optional[bytes]) -> Optional[str]:
        """Decrypt a token"""
        if not encrypted_token:
            return None
        return self.fernet.decrypt(encrypted_token).decode()
