"""Cryptographic layer for Veil.

This module provides:
- Primitives: AES-256-GCM, X25519 anonymous sealing, key/nonce generation
- Hybrid cipher: content encrypted once, key wrapped per recipient
"""

from veil.crypto.hybrid import (
    SealedPayload,
    open_payload,
    open_sealed,
    seal,
)
from veil.crypto.primitives import (
    ALGORITHM,
    NONCE_BYTES,
    SYMMETRIC_KEY_BYTES,
    generate_keypair,
    open_anonymous,
    seal_anonymous,
)

__all__ = [
    # Hybrid cipher
    "SealedPayload",
    "seal",
    "open_sealed",
    "open_payload",
    # Primitives
    "ALGORITHM",
    "NONCE_BYTES",
    "SYMMETRIC_KEY_BYTES",
    "generate_keypair",
    "seal_anonymous",
    "open_anonymous",
]
