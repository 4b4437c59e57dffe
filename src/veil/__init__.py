# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Veil - access-controlled encrypted values.

An encrypted value carries a payload plus the set of parties allowed to read
it. Values are combined lazily (``transform``, ``bind``, ``restrict``) and
the permission set of the result is derived from everything that went into
it: a transform keeps the readers, a bind intersects them, a restriction
narrows them. ``materialize`` turns a readable value into hybrid ciphertext
(AES-256-GCM content, one X25519-sealed key per allowed recipient).

Architecture:
  Identity / Registry (caller-supplied keys)
    -> Payload codec (value <-> bytes)
    -> Hybrid cipher (seal / open)
    -> Encrypted-value algebra (plain, transform, bind, restrict,
       materialize, reveal, allowed)
"""

__version__ = "0.3.0"

from veil.codec import (
    BytesCodec,
    JSONCodec,
    PayloadCodec,
    PickleCodec,
    TextCodec,
    get_codec,
    register_codec,
)
from veil.core.exceptions import (
    CodecError,
    ConfigException,
    KeyMaterialError,
    VeilException,
)
from veil.encrypted import (
    Bound,
    EncryptedValue,
    Plain,
    Restricted,
    Sealed,
    Transformed,
    allowed,
    allowed_ids,
    bind,
    materialize,
    plain,
    restrict,
    reveal,
    transform,
)
from veil.identity import Identity, PublicKeyRegistry, Registry

__all__ = [
    # Algebra
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
    "materialize",
    "reveal",
    "allowed",
    "allowed_ids",
    # Identity
    "Identity",
    "Registry",
    "PublicKeyRegistry",
    # Codecs
    "PayloadCodec",
    "PickleCodec",
    "JSONCodec",
    "TextCodec",
    "BytesCodec",
    "get_codec",
    "register_codec",
    # Exceptions
    "VeilException",
    "CodecError",
    "KeyMaterialError",
    "ConfigException",
]
