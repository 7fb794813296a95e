"""Crypto helpers for MEGA public links."""
from .encoding import Base64Encoder
from .file import (
    FileKey,
    MegaDecrypt,
    MegaEncrypt,
    chunk_bounds,
    decrypt_attributes,
    encrypt_attributes,
)

__all__ = [
    'Base64Encoder',
    'FileKey',
    'MegaDecrypt',
    'MegaEncrypt',
    'chunk_bounds',
    'decrypt_attributes',
    'encrypt_attributes',
]
