"""Hybrid cipher: one symmetric key for the content, wrapped once per recipient.

``seal`` encrypts a plaintext under a fresh AES-256-GCM key and nonce, then
seals that key to every recipient's public key. ``open_sealed`` reverses it
for a single recipient.

Failure policy:
- A recipient with no wrapped key, a wrapped key that does not open, and
  content that fails authentication all produce ``None``. Callers cannot
  tell these cases apart.
- Nothing is retried.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Union

from veil.core.exceptions import KeyMaterialError
from veil.crypto.primitives import (
    ALGORITHM,
    InvalidTag,
    aead_decrypt,
    aead_encrypt,
    generate_nonce,
    generate_symmetric_key,
    open_anonymous,
    seal_anonymous,
)

if TYPE_CHECKING:
    from veil.identity.keys import Identity

logger = logging.getLogger(__name__)

Recipients = Union[Mapping[str, bytes], Iterable["Identity"]]


@dataclass(frozen=True)
class SealedPayload:
    """Ciphertext plus one wrapped symmetric key per recipient.

    Attributes:
        cipher_bytes: AES-256-GCM ciphertext with the tag appended
        nonce: Nonce the content was encrypted under
        wrapped_keys: Recipient ID -> symmetric key sealed to that recipient
        algorithm: Label of the construction that produced the payload
    """

    cipher_bytes: bytes
    nonce: bytes
    wrapped_keys: Mapping[str, bytes] = field(default_factory=dict)
    algorithm: str = ALGORITHM

    def __post_init__(self) -> None:
        object.__setattr__(self, "wrapped_keys", MappingProxyType(dict(self.wrapped_keys)))

    @property
    def recipient_ids(self) -> frozenset[str]:
        """IDs holding a wrapped key."""
        return frozenset(self.wrapped_keys)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "cipher_bytes": base64.b64encode(self.cipher_bytes).decode(),
            "nonce": base64.b64encode(self.nonce).decode(),
            "wrapped_keys": {
                recipient: base64.b64encode(wrapped).decode()
                for recipient, wrapped in sorted(self.wrapped_keys.items())
            },
            "algorithm": self.algorithm,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SealedPayload":
        """Deserialize from dictionary."""
        return cls(
            cipher_bytes=base64.b64decode(data["cipher_bytes"]),
            nonce=base64.b64decode(data["nonce"]),
            wrapped_keys={
                recipient: base64.b64decode(wrapped)
                for recipient, wrapped in data.get("wrapped_keys", {}).items()
            },
            algorithm=data.get("algorithm", ALGORITHM),
        )


def _public_keys(recipients: Recipients) -> dict[str, bytes]:
    if isinstance(recipients, Mapping):
        return dict(recipients)
    return dict(identity.public_entry() for identity in recipients)


def seal(plaintext: bytes, recipients: Recipients) -> SealedPayload:
    """Encrypt ``plaintext`` so that every recipient can open it.

    Args:
        plaintext: The bytes to encrypt
        recipients: Mapping of recipient ID to raw public key, or identities

    Returns:
        SealedPayload holding the ciphertext and the wrapped keys

    Raises:
        KeyMaterialError: If a recipient's public key is malformed
    """
    public_keys = _public_keys(recipients)

    key = bytearray(generate_symmetric_key())
    nonce = generate_nonce()
    try:
        cipher_bytes = aead_encrypt(key, nonce, plaintext)
        wrapped_keys = {}
        for recipient, public_key in public_keys.items():
            try:
                wrapped_keys[recipient] = seal_anonymous(bytes(key), public_key)
            except (TypeError, ValueError) as e:
                raise KeyMaterialError(
                    f"Cannot wrap key for {recipient!r}: {e}",
                    key_id=recipient,
                ) from e
    finally:
        key[:] = bytes(len(key))

    logger.debug(
        "Sealed payload",
        extra={"extra_data": {"recipient_count": len(wrapped_keys), "size": len(cipher_bytes)}},
    )
    return SealedPayload(cipher_bytes=cipher_bytes, nonce=nonce, wrapped_keys=wrapped_keys)


def open_sealed(
    cipher_bytes: bytes,
    nonce: bytes,
    wrapped_keys: Mapping[str, bytes],
    identity: Identity | None,
) -> bytes | None:
    """Recover the plaintext for one recipient.

    Args:
        cipher_bytes: Ciphertext produced by ``seal``
        nonce: Nonce produced by ``seal``
        wrapped_keys: Wrapped keys produced by ``seal``
        identity: The reading party, with its full key pair

    Returns:
        The plaintext, or None if ``identity`` cannot read it
    """
    if identity is None:
        return None

    wrapped = wrapped_keys.get(identity.id)
    if wrapped is None:
        logger.debug("No wrapped key", extra={"extra_data": {"recipient": identity.id}})
        return None

    try:
        key = open_anonymous(wrapped, identity.public_key, identity.private_key)
        return aead_decrypt(key, nonce, cipher_bytes)
    except (InvalidTag, TypeError, ValueError):
        logger.debug("Open failed", extra={"extra_data": {"recipient": identity.id}})
        return None


def open_payload(payload: SealedPayload, identity: Identity | None) -> bytes | None:
    """``open_sealed`` over the fields of a :class:`SealedPayload`."""
    return open_sealed(payload.cipher_bytes, payload.nonce, payload.wrapped_keys, identity)
