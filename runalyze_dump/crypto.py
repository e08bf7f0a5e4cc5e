"""Password encryption for the config file, using Fernet."""

import logging
from cryptography.fernet import Fernet, InvalidToken

from runalyze_dump.config import Config

logger = logging.getLogger(__name__)


def get_or_create_key():
    """Get encryption key from environment or generate a new one."""
    key = Config.ENCRYPTION_KEY

    if key:
        return key.encode() if isinstance(key, str) else key

    key = Fernet.generate_key()
    logger.warning(
        "RUNALYZE_ENCRYPTION_KEY not set. A new key has been generated.\n"
        "Please save this key to your environment variables:\n"
        f"RUNALYZE_ENCRYPTION_KEY={key.decode()}"
    )
    # Keep using the same key for the rest of this process
    Config.ENCRYPTION_KEY = key.decode()
    return key


def get_fernet():
    """Get Fernet instance with the encryption key."""
    return Fernet(get_or_create_key())


def encrypt_password(password):
    """Encrypt a password string."""
    if not password:
        return None

    encrypted = get_fernet().encrypt(password.encode())
    return encrypted.decode()


def decrypt_password(encrypted_password):
    """Decrypt an encrypted password string."""
    if not encrypted_password:
        return None

    try:
        decrypted = get_fernet().decrypt(encrypted_password.encode())
        return decrypted.decode()
    except (InvalidToken, ValueError) as e:
        logger.error("Failed to decrypt password")
        raise ValueError("Invalid encryption key or corrupted data") from e
