"""Immutable registry of public keys.

A registry maps party IDs to raw X25519 public keys. It is never mutated in
place: ``with_key`` returns a new registry, so one handed to
``materialize`` cannot change underneath a sealed value.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from veil.identity.keys import Identity, check_public_key


@runtime_checkable
class PublicKeyRegistry(Protocol):
    """Read-only lookup interface consumed by ``materialize``.

    Callers may supply their own implementation (e.g. one populated from a
    directory service) as long as it answers these two queries.
    """

    def lookup(self, key_id: str) -> bytes | None: ...
    def all_ids(self) -> frozenset[str]: ...


class Registry:
    """Persistent mapping of party ID to public key."""

    __slots__ = ("_keys",)

    def __init__(self, keys: Mapping[str, bytes] | None = None):
        validated = {key_id: check_public_key(key_id, pk) for key_id, pk in (keys or {}).items()}
        self._keys: Mapping[str, bytes] = MappingProxyType(validated)

    @classmethod
    def from_identities(cls, *identities: Identity) -> "Registry":
        """Build a registry holding the public halves of ``identities``."""
        return cls(dict(identity.public_entry() for identity in identities))

    def lookup(self, key_id: str) -> bytes | None:
        """Get the public key registered for ``key_id``, or None."""
        return self._keys.get(key_id)

    def all_ids(self) -> frozenset[str]:
        """Every ID with a registered public key."""
        return frozenset(self._keys)

    def with_key(self, key_id: str, public_key: bytes) -> "Registry":
        """Return a new registry that also maps ``key_id`` to ``public_key``.

        An existing entry for ``key_id`` is replaced in the new registry only.
        """
        return Registry({**self._keys, key_id: public_key})

    def with_identity(self, identity: Identity) -> "Registry":
        """Return a new registry that also holds ``identity``'s public key."""
        return self.with_key(*identity.public_entry())

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key_id: object) -> bool:
        return key_id in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __repr__(self) -> str:
        return f"Registry(ids={sorted(self._keys)})"


def recipients_for(registry: PublicKeyRegistry, ids: Iterable[str]) -> dict[str, bytes]:
    """Resolve ``ids`` to their public keys, skipping unknown IDs."""
    resolved = {}
    for key_id in ids:
        public_key = registry.lookup(key_id)
        if public_key is not None:
            resolved[key_id] = public_key
    return resolved
