"""
Security utilities for EduMorph

This module provides centralized security functions for:
- Encryption key management
- JWT secret management
- Input sanitization
- Collection name validation for the document store
"""

import os
import re
import logging
from pathlib import Path
from cryptography.fernet import Fernet
import secrets

logger = logging.getLogger(__name__)


# Security configuration
SECURITY_DIR = Path.home() / ".edumorph"
ENCRYPTION_KEY_FILE = SECURITY_DIR / "encryption.key"
JWT_SECRET_FILE = SECURITY_DIR / "jwt.secret"

# Input sanitization limits
MAX_INPUT_LENGTH = 10000  # Maximum characters for user input
MAX_LABEL_LENGTH = 200  # Subject / topic names


def _write_private_file(path: Path, data, mode: str) -> None:
    with open(path, mode) as f:
        f.write(data)

    # Owner read/write only
    try:
        os.chmod(path, 0o600)
    except (OSError, AttributeError) as e:
        logger.debug(
            f"Cannot set file permissions on {path}: {e} (expected on Windows)"
        )


def get_or_create_encryption_key() -> bytes:
    """
    Get or create persistent encryption key.

    The key is stored in ~/.edumorph/encryption.key with restricted permissions.
    If the key doesn't exist, a new one is generated and saved.

    Returns:
        bytes: The encryption key

    Raises:
        PermissionError: If unable to create security directory or key file
    """
    env_key = os.getenv("EDUMORPH_ENCRYPTION_KEY")
    if env_key:
        return env_key.encode()

    SECURITY_DIR.mkdir(parents=True, exist_ok=True)

    if ENCRYPTION_KEY_FILE.exists():
        with open(ENCRYPTION_KEY_FILE, "rb") as f:
            return f.read()

    key = Fernet.generate_key()
    _write_private_file(ENCRYPTION_KEY_FILE, key, "wb")
    return key


def get_or_create_jwt_secret() -> str:
    """
    Get or create persistent JWT secret.

    The secret is stored in ~/.edumorph/jwt.secret with restricted permissions.
    If the secret doesn't exist, a new one is generated and saved.

    Returns:
        str: The JWT secret
    """
    env_secret = os.getenv("JWT_SECRET")
    if env_secret:
        return env_secret

    SECURITY_DIR.mkdir(parents=True, exist_ok=True)

    if JWT_SECRET_FILE.exists():
        with open(JWT_SECRET_FILE, "r") as f:
            return f.read().strip()

    secret = secrets.token_urlsafe(32)
    _write_private_file(JWT_SECRET_FILE, secret, "w")
    return secret


def sanitize_input(text: str, max_length: int = MAX_INPUT_LENGTH) -> str:
    """
    Sanitize free-text user input.

    This function:
    - Removes control characters (except newlines and tabs)
    - Strips surrounding whitespace
    - Truncates to maximum length

    Args:
        text: The input text to sanitize
        max_length: Maximum allowed length (default: 10000)

    Returns:
        str: Sanitized text
    """
    if not text:
        return ""

    sanitized = "".join(
        char for char in text if char.isprintable() or char in ("\n", "\t", "\r")
    ).strip()

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


def sanitize_label(text: str) -> str:
    """Sanitize a short single-line label such as a display name."""
    return sanitize_input(text.replace("\n", " ").replace("\t", " "), MAX_LABEL_LENGTH)


def validate_collection_name(name: str) -> bool:
    """
    Validate a document collection name.

    Only allows letters, digits and underscores, starting with a letter or
    underscore (e.g. "progress", "performanceMetrics").
    """
    if not name:
        return False

    return bool(re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", name))
