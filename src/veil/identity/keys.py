"""Party identities: a stable string ID plus an X25519 key pair.

The private half is only ever handed to ``reveal``/``materialize`` as a
call parameter. Nothing in :mod:`veil.encrypted` persists it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from veil.core.exceptions import KeyMaterialError
from veil.crypto.primitives import (
    PRIVATE_KEY_BYTES,
    PUBLIC_KEY_BYTES,
    generate_keypair,
    public_key_from_private,
)


def check_public_key(key_id: str, public_key: Any) -> bytes:
    """Validate a raw public key, returning it as ``bytes``.

    Raises:
        KeyMaterialError: If the key is not bytes of the expected length
    """
    if not isinstance(public_key, (bytes, bytearray)):
        raise KeyMaterialError(
            f"Public key for {key_id!r} must be bytes, got {type(public_key).__name__}",
            key_id=key_id,
        )
    if len(public_key) != PUBLIC_KEY_BYTES:
        raise KeyMaterialError(
            f"Public key for {key_id!r} must be {PUBLIC_KEY_BYTES} bytes",
            key_id=key_id,
            length=len(public_key),
        )
    return bytes(public_key)


@dataclass(frozen=True)
class Identity:
    """A party able to read encrypted values.

    Attributes:
        id: Identifier of the party, unique within one registry
        public_key: Raw X25519 public key (32 bytes)
        private_key: Raw X25519 private key (32 bytes, SENSITIVE!)
    """

    id: str
    public_key: bytes
    private_key: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise KeyMaterialError("Identity id must be a non-empty string")
        object.__setattr__(self, "public_key", check_public_key(self.id, self.public_key))
        if not isinstance(self.private_key, (bytes, bytearray)) or len(self.private_key) != PRIVATE_KEY_BYTES:
            raise KeyMaterialError(
                f"Private key for {self.id!r} must be {PRIVATE_KEY_BYTES} bytes",
                key_id=self.id,
            )
        object.__setattr__(self, "private_key", bytes(self.private_key))
        if public_key_from_private(self.private_key) != self.public_key:
            raise KeyMaterialError(f"Key pair for {self.id!r} is inconsistent", key_id=self.id)

    @classmethod
    def generate(cls, id: str) -> "Identity":
        """Generate a new identity with a fresh key pair."""
        private_key, public_key = generate_keypair()
        return cls(id=id, public_key=public_key, private_key=private_key)

    @classmethod
    def from_private_key(cls, id: str, private_key: bytes) -> "Identity":
        """Rebuild an identity from its stored private key."""
        try:
            public_key = public_key_from_private(private_key)
        except (TypeError, ValueError) as e:
            raise KeyMaterialError(f"Invalid private key for {id!r}: {e}", key_id=id) from e
        return cls(id=id, public_key=public_key, private_key=private_key)

    def public_entry(self) -> tuple[str, bytes]:
        """The ``(id, public_key)`` pair a registry stores for this party."""
        return self.id, self.public_key
