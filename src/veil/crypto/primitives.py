"""Cryptographic primitives for hybrid encryption.

Implements the three building blocks the hybrid cipher is composed from:

- Fixed-length random symmetric keys and nonces
- AES-256-GCM authenticated encryption for bulk content
- Anonymous sealing of short messages (symmetric keys) to an X25519
  public key: an ephemeral X25519 key pair per message, HKDF-SHA256 over the
  shared secret, AES-256-GCM under the derived key

A sealed message is ``ephemeral_public_key || ciphertext || tag``. Anyone
holding the recipient's public key can produce one; opening it requires the
recipient's full key pair.
"""

from __future__ import annotations

import os
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

SYMMETRIC_KEY_BYTES = 32
NONCE_BYTES = 12
TAG_BYTES = 16
PUBLIC_KEY_BYTES = 32
PRIVATE_KEY_BYTES = 32
SEAL_OVERHEAD = PUBLIC_KEY_BYTES + TAG_BYTES

ALGORITHM = "AES-256-GCM+X25519-SEAL"

_SEAL_INFO = b"veil-anonymous-seal"


def generate_symmetric_key() -> bytes:
    """Generate a fresh random AES-256 key."""
    return AESGCM.generate_key(bit_length=SYMMETRIC_KEY_BYTES * 8)


def generate_nonce() -> bytes:
    """Generate a fresh random AES-GCM nonce."""
    return os.urandom(NONCE_BYTES)


def aead_encrypt(key: bytes, nonce: bytes, plaintext: bytes) -> bytes:
    """Encrypt and authenticate ``plaintext``; the tag is appended."""
    return AESGCM(key).encrypt(nonce, plaintext, None)


def aead_decrypt(key: bytes, nonce: bytes, ciphertext: bytes) -> bytes:
    """Authenticate and decrypt ``ciphertext``.

    Raises:
        InvalidTag: If the key, nonce or ciphertext do not match
        ValueError: If the key or nonce has an unsupported length
    """
    return AESGCM(key).decrypt(nonce, ciphertext, None)


def _derive_seal_key(shared_secret: bytes, ephemeral_public: bytes, recipient_public: bytes) -> Tuple[bytes, bytes]:
    # info commits to both public keys
    material = HKDF(
        algorithm=hashes.SHA256(),
        length=SYMMETRIC_KEY_BYTES + NONCE_BYTES,
        salt=None,
        info=_SEAL_INFO + ephemeral_public + recipient_public,
    ).derive(shared_secret)
    return material[:SYMMETRIC_KEY_BYTES], material[SYMMETRIC_KEY_BYTES:]


def seal_anonymous(message: bytes, recipient_public_key: bytes) -> bytes:
    """Seal ``message`` so only the holder of the matching private key can open it.

    Args:
        message: The bytes to seal (typically a symmetric key)
        recipient_public_key: Recipient's raw X25519 public key (32 bytes)

    Returns:
        Ephemeral public key followed by the authenticated ciphertext

    Raises:
        ValueError: If the public key is not a valid X25519 key
    """
    recipient_key = X25519PublicKey.from_public_bytes(recipient_public_key)

    ephemeral_private = X25519PrivateKey.generate()
    ephemeral_public = ephemeral_private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )

    shared_secret = ephemeral_private.exchange(recipient_key)
    key, nonce = _derive_seal_key(shared_secret, ephemeral_public, recipient_public_key)

    return ephemeral_public + aead_encrypt(key, nonce, message)


def open_anonymous(sealed: bytes, public_key: bytes, private_key: bytes) -> bytes:
    """Open a message produced by :func:`seal_anonymous`.

    Args:
        sealed: Output of ``seal_anonymous``
        public_key: Recipient's raw X25519 public key
        private_key: Recipient's raw X25519 private key

    Returns:
        The original message

    Raises:
        InvalidTag: If the message was not sealed for this key pair or was altered
        ValueError: If the input is truncated or the key pair is inconsistent
    """
    if len(sealed) < SEAL_OVERHEAD:
        raise ValueError(f"Sealed message too short: {len(sealed)} bytes")

    recipient_private = X25519PrivateKey.from_private_bytes(private_key)
    if public_key_from_private(private_key) != public_key:
        raise ValueError("Private key does not match public key")

    ephemeral_public = sealed[:PUBLIC_KEY_BYTES]
    shared_secret = recipient_private.exchange(X25519PublicKey.from_public_bytes(ephemeral_public))
    key, nonce = _derive_seal_key(shared_secret, ephemeral_public, public_key)

    return aead_decrypt(key, nonce, sealed[PUBLIC_KEY_BYTES:])


def public_key_from_private(private_key: bytes) -> bytes:
    """Recompute the raw X25519 public key for a raw private key."""
    return (
        X25519PrivateKey.from_private_bytes(private_key)
        .public_key()
        .public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
    )


def generate_keypair() -> Tuple[bytes, bytes]:
    """Generate an X25519 keypair for key wrapping.

    Returns:
        Tuple of (private_key_bytes, public_key_bytes)
    """
    private_key = X25519PrivateKey.generate()

    private_bytes = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_bytes = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )

    return private_bytes, public_bytes


__all__ = [
    "ALGORITHM",
    "InvalidTag",
    "NONCE_BYTES",
    "PRIVATE_KEY_BYTES",
    "PUBLIC_KEY_BYTES",
    "SEAL_OVERHEAD",
    "SYMMETRIC_KEY_BYTES",
    "TAG_BYTES",
    "aead_decrypt",
    "aead_encrypt",
    "generate_keypair",
    "generate_nonce",
    "generate_symmetric_key",
    "open_anonymous",
    "public_key_from_private",
    "seal_anonymous",
]
