"""Encrypted values whose permission sets compose as the values do.

An :class:`EncryptedValue` is one of five variants:

- :class:`Plain` - content held in the clear, readable by everyone
- :class:`Sealed` - hybrid ciphertext with one wrapped key per recipient
- :class:`Transformed` - lazy ``f(prev)``; same readers as ``prev``
- :class:`Bound` - lazy ``f(prev)`` where ``f`` returns another encrypted
  value; readers must be allowed on both sides
- :class:`Restricted` - ``prev`` narrowed to an explicit allow-list

The set is closed: subclasses outside this module are rejected. Values are
immutable and compare by identity, never by content or permissions.

``allowed`` and ``reveal`` are evaluated structurally on every call; nothing
is cached. ``materialize`` turns any value its caller can read into a
:class:`Sealed` value bound to the registry IDs the value currently allows.

Example:
    >>> from veil import Identity, Registry
    >>> alice, bob = Identity.generate("alice"), Identity.generate("bob")
    >>> registry = Registry.from_identities(alice, bob)
    >>> secret = materialize(restrict(plain("secret"), {"alice"}), alice, registry)
    >>> secret.reveal(alice)
    'secret'
    >>> secret.reveal(bob) is None
    True

A payload of ``None`` cannot be told apart from "not revealable": ``reveal``
returns ``None`` for both.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, TypeVar

from veil.codec import PayloadCodec, get_codec, resolve_codec
from veil.core.config import get_config
from veil.core.exceptions import CodecError
from veil.core.logging import operation_context
from veil.crypto.hybrid import SealedPayload, open_sealed, seal
from veil.crypto.primitives import ALGORITHM
from veil.identity.keys import Identity
from veil.identity.registry import PublicKeyRegistry, recipients_for

logger = logging.getLogger(__name__)

A = TypeVar("A")
B = TypeVar("B")


class EncryptedValue(ABC, Generic[A]):
    """A payload of type ``A`` together with the parties allowed to read it."""

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__module__ != __name__:
            raise TypeError(f"{cls.__name__}: EncryptedValue variants cannot be extended")

    @abstractmethod
    def allowed(self, id: str) -> bool:
        """Whether the party ``id`` may read this value."""

    @abstractmethod
    def reveal(self, identity: Identity | None) -> A | None:
        """Recover the payload as ``identity``, or None if it cannot be read."""

    def map(self, f: Callable[[A], B]) -> EncryptedValue[B]:
        """Lazily apply ``f`` to the payload. Readers are unchanged."""
        return Transformed(self, f)

    def flat_map(
        self,
        f: Callable[[A], EncryptedValue[B]],
        identity: Identity | None,
        strict: bool | None = None,
    ) -> EncryptedValue[B]:
        """Lazily combine with the encrypted value ``f`` produces.

        Args:
            f: Function from this payload to another encrypted value
            identity: The composing party, used to evaluate ``allowed``
            strict: Deny when the composer cannot read this value
                (None uses the ``strict_bind`` setting)
        """
        return Bound(self, f, identity, _strict_default(strict))

    def restrict(self, ids: Iterable[str]) -> EncryptedValue[A]:
        """Narrow readers to ``ids`` (intersected with current readers)."""
        return Restricted(self, frozenset(ids))

    def materialize(
        self,
        identity: Identity | None,
        registry: PublicKeyRegistry | None,
        codec: PayloadCodec | str | None = None,
    ) -> EncryptedValue[A]:
        """See :func:`materialize`."""
        return materialize(self, identity, registry, codec)


# =============================================================================
# Variants
# =============================================================================


@dataclass(frozen=True, eq=False)
class Plain(EncryptedValue[A]):
    """Content in the clear. Everyone is allowed until it is restricted."""

    content: A

    def allowed(self, id: str) -> bool:
        return True

    def reveal(self, identity: Identity | None) -> A | None:
        return self.content


@dataclass(frozen=True, eq=False)
class Sealed(EncryptedValue[A]):
    """Hybrid ciphertext readable by the holders of a wrapped key.

    Attributes:
        cipher_bytes: AES-256-GCM ciphertext of the encoded payload
        wrapped_keys: Recipient ID -> content key sealed to that recipient
        nonce: Nonce of the content encryption
        codec: Codec that encoded the payload
        algorithm: Label of the hybrid construction
    """

    cipher_bytes: bytes
    wrapped_keys: Mapping[str, bytes]
    nonce: bytes
    codec: PayloadCodec = field(default_factory=get_codec)
    algorithm: str = ALGORITHM

    def __post_init__(self) -> None:
        object.__setattr__(self, "wrapped_keys", MappingProxyType(dict(self.wrapped_keys)))

    @classmethod
    def from_payload(cls, payload: SealedPayload, codec: PayloadCodec) -> "Sealed[Any]":
        return cls(
            cipher_bytes=payload.cipher_bytes,
            wrapped_keys=payload.wrapped_keys,
            nonce=payload.nonce,
            codec=codec,
            algorithm=payload.algorithm,
        )

    @property
    def payload(self) -> SealedPayload:
        """The cryptographic fields as a :class:`SealedPayload`."""
        return SealedPayload(
            cipher_bytes=self.cipher_bytes,
            nonce=self.nonce,
            wrapped_keys=self.wrapped_keys,
            algorithm=self.algorithm,
        )

    def allowed(self, id: str) -> bool:
        return id in self.wrapped_keys

    def reveal(self, identity: Identity | None) -> A | None:
        data = open_sealed(self.cipher_bytes, self.nonce, self.wrapped_keys, identity)
        if data is None:
            return None
        try:
            return self.codec.decode(data)
        except CodecError:
            logger.warning(f"Sealed value opened but failed to decode with codec {self.codec.name!r}")
            raise

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {**self.payload.to_dict(), "codec": self.codec.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sealed[Any]":
        """Deserialize from dictionary.

        Raises:
            ConfigException: If the recorded codec is not registered
        """
        return cls.from_payload(SealedPayload.from_dict(data), get_codec(data.get("codec")))


@dataclass(frozen=True, eq=False)
class Transformed(EncryptedValue[A]):
    """Deferred ``f(prev)``. Holds no payload of its own."""

    prev: EncryptedValue[Any]
    f: Callable[[Any], A]

    def allowed(self, id: str) -> bool:
        return self.prev.allowed(id)

    def reveal(self, identity: Identity | None) -> A | None:
        content = self.prev.reveal(identity)
        if content is None:
            return None
        return self.f(content)


@dataclass(frozen=True, eq=False)
class Bound(EncryptedValue[A]):
    """Deferred dependent composition ``f(prev)``.

    ``composer`` is the identity that built the composition. It is only used
    to evaluate ``allowed``: a party is allowed when it is allowed on ``prev``
    and on ``f(content)``, where content is ``prev`` as seen by the composer.
    If the composer cannot read ``prev``, the second conjunct is skipped
    (``True``) unless ``strict`` is set, in which case it is ``False``.
    """

    prev: EncryptedValue[Any]
    f: Callable[[Any], EncryptedValue[A]]
    composer: Identity | None = field(default=None, repr=False)
    strict: bool = False

    def allowed(self, id: str) -> bool:
        if not self.prev.allowed(id):
            return False
        content = self.prev.reveal(self.composer)
        if content is None:
            return not self.strict
        return self.f(content).allowed(id)

    def reveal(self, identity: Identity | None) -> A | None:
        content = self.prev.reveal(identity)
        if content is None:
            return None
        return self.f(content).reveal(identity)


@dataclass(frozen=True, eq=False)
class Restricted(EncryptedValue[A]):
    """``prev`` readable only by IDs in ``allowed_ids``."""

    prev: EncryptedValue[A]
    allowed_ids: frozenset[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_ids", frozenset(self.allowed_ids))

    def allowed(self, id: str) -> bool:
        return id in self.allowed_ids and self.prev.allowed(id)

    def reveal(self, identity: Identity | None) -> A | None:
        # prev is never touched for a denied identity
        if identity is None or not self.allowed(identity.id):
            return None
        return self.prev.reveal(identity)


# =============================================================================
# Public API
# =============================================================================


def _strict_default(strict: bool | None) -> bool:
    return get_config().strict_bind if strict is None else strict


def plain(content: A) -> EncryptedValue[A]:
    """Wrap bare content; readable by everyone until restricted or materialized."""
    return Plain(content)


def transform(value: EncryptedValue[A], f: Callable[[A], B]) -> EncryptedValue[B]:
    """Lazily apply ``f`` to the payload of ``value``."""
    return Transformed(value, f)


def bind(
    value: EncryptedValue[A],
    f: Callable[[A], EncryptedValue[B]],
    identity: Identity | None,
    strict: bool | None = None,
) -> EncryptedValue[B]:
    """Compose ``value`` with the encrypted value ``f`` produces from its payload.

    ``identity`` is captured as the composer (see :class:`Bound`).
    """
    return Bound(value, f, identity, _strict_default(strict))


def restrict(value: EncryptedValue[A], ids: Iterable[str]) -> EncryptedValue[A]:
    """Narrow the readers of ``value`` to ``ids``. Never widens."""
    return Restricted(value, frozenset(ids))


def reveal(value: EncryptedValue[A], identity: Identity | None) -> A | None:
    """Recover the payload of ``value`` as ``identity``, or None."""
    return value.reveal(identity)


def allowed(value: EncryptedValue[Any], id: str) -> bool:
    """Whether the party ``id`` may read ``value``."""
    return value.allowed(id)


def allowed_ids(value: EncryptedValue[Any], registry: PublicKeyRegistry) -> frozenset[str]:
    """The registry IDs ``value`` currently allows."""
    return frozenset(key_id for key_id in registry.all_ids() if value.allowed(key_id))


def materialize(
    value: EncryptedValue[A],
    identity: Identity | None,
    registry: PublicKeyRegistry | None,
    codec: PayloadCodec | str | None = None,
) -> EncryptedValue[A]:
    """Encrypt ``value`` for every registry ID it allows.

    The caller must be able to read ``value`` itself; otherwise, and when no
    registry is given, ``value`` is returned unchanged. A value that is
    already :class:`Sealed` is returned unchanged.

    Args:
        value: The value to encrypt
        identity: The materializing party
        registry: Public keys of the candidate recipients
        codec: Codec instance or name (None uses the ``default_codec`` setting)

    Returns:
        A :class:`Sealed` value, or ``value`` itself

    Raises:
        CodecError: If the payload cannot be encoded
        KeyMaterialError: If a recipient's public key is malformed
    """
    if isinstance(value, Sealed) or registry is None:
        return value

    with operation_context():
        content = value.reveal(identity)
        if content is None:
            logger.debug(
                "Materialize skipped: value not readable by caller",
                extra={"extra_data": {"caller": identity.id if identity else None}},
            )
            return value

        payload_codec = resolve_codec(codec)
        data = payload_codec.encode(content)

        recipients = recipients_for(registry, sorted(allowed_ids(value, registry)))
        if not recipients:
            logger.warning("Materialized value has no recipients; nobody can read it")

        sealed = Sealed.from_payload(seal(data, recipients), payload_codec)
        logger.debug(
            "Materialized value",
            extra={"extra_data": {"recipients": sorted(recipients), "codec": payload_codec.name}},
        )
        return sealed


__all__ = [
    "EncryptedValue",
    "Plain",
    "Sealed",
    "Transformed",
    "Bound",
    "Restricted",
    "plain",
    "transform",
    "bind",
    "restrict",
    "reveal",
    "allowed",
    "allowed_ids",
    "materialize",
]
