"""
Security utilities: ids, content hashes, filename sanitizing, IP hashing.
"""

import hashlib
import logging
import re
import uuid
from typing import Optional

from ecocity.core.settings import settings

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 255
_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def generate_report_id() -> str:
    """16 lowercase hex characters from a random UUID."""
    return uuid.uuid4().hex[:16]


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sanitize_filename(filename: Optional[str]) -> Optional[str]:
    """
    Replace anything outside [A-Za-z0-9._-] with "_" and cap the length.

    Returns None for a missing filename.
    """
    if not filename:
        return None
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)[:MAX_FILENAME_LENGTH]


def hash_ip_address(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash IP address for privacy protection.

    Uses SHA-256 with a configurable salt.
    Stores only first 16 characters (64 bits) for reasonable uniqueness.

    Args:
        ip_address: Raw IP address string (IPv4 or IPv6)

    Returns:
        Hashed IP address (first 16 chars) or None if input is None/empty
    """
    if not ip_address or not ip_address.strip():
        return None

    hashed = hashlib.sha256(f"{settings.IP_HASH_SALT}{ip_address.strip()}".encode()).hexdigest()
    return hashed[:16]
