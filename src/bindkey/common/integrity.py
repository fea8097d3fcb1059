"""Integrity checking helpers."""

import binascii
import hashlib


def sha256(message: bytes) -> bytes:
    """Create SHA-256 digest from bytes."""
    return hashlib.sha256(message).digest()


def checksum_bytes2str(message: bytes) -> str:
    """Format SHA-256 digest of a file's contents for logging."""
    hexdigest = binascii.hexlify(sha256(message)).decode()
    return f"SHA-256 {hexdigest}"
