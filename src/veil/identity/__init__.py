"""Identities and public key registries.

Key concepts:
- **Identity**: a party's stable ID plus its X25519 key pair.
- **Registry**: immutable ID -> public key mapping, extended by persistent add.
- **PublicKeyRegistry**: the read-only lookup protocol ``materialize`` consumes.
"""

from veil.identity.keys import Identity, check_public_key
from veil.identity.registry import PublicKeyRegistry, Registry, recipients_for

__all__ = [
    "Identity",
    "PublicKeyRegistry",
    "Registry",
    "check_public_key",
    "recipients_for",
]
