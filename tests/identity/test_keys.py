"""Tests for Identity."""

from __future__ import annotations

import dataclasses

import pytest

from veil.core.exceptions import KeyMaterialError
from veil.crypto.primitives import generate_keypair
from veil.identity import Identity


class TestIdentity:
    """Tests for identity construction and validation."""

    def test_generate(self):
        """generate() creates a consistent key pair."""
        identity = Identity.generate("alice")

        assert identity.id == "alice"
        assert len(identity.public_key) == 32
        assert len(identity.private_key) == 32

    def test_generate_unique(self):
        """Each generated identity has its own keys."""
        assert Identity.generate("a").public_key != Identity.generate("a").public_key

    def test_from_private_key(self):
        """An identity can be rebuilt from its private key alone."""
        original = Identity.generate("bob")
        restored = Identity.from_private_key("bob", original.private_key)

        assert restored == original

    def test_from_invalid_private_key(self):
        """A private key of the wrong length is rejected."""
        with pytest.raises(KeyMaterialError):
            Identity.from_private_key("bob", b"short")

    def test_private_key_not_in_repr(self):
        """repr() never shows private key material."""
        identity = Identity.generate("carol")
        assert identity.private_key.hex() not in repr(identity)
        assert repr(identity.private_key) not in repr(identity)

    def test_immutable(self):
        """Identities are frozen."""
        identity = Identity.generate("dave")
        with pytest.raises(dataclasses.FrozenInstanceError):
            identity.id = "mallory"

    def test_public_entry(self):
        """public_entry() is what a registry stores."""
        identity = Identity.generate("erin")
        assert identity.public_entry() == ("erin", identity.public_key)

    def test_bytearray_keys_normalized(self):
        """bytearray keys are stored as bytes."""
        private_key, public_key = generate_keypair()
        identity = Identity("frank", bytearray(public_key), bytearray(private_key))

        assert type(identity.public_key) is bytes
        assert type(identity.private_key) is bytes


class TestIdentityValidation:
    """Tests for rejected key material."""

    def test_empty_id(self):
        """An identity needs a non-empty ID."""
        private_key, public_key = generate_keypair()
        with pytest.raises(KeyMaterialError):
            Identity("", public_key, private_key)

    @pytest.mark.parametrize("public_key", [b"", b"x" * 31, b"x" * 33, "not-bytes"])
    def test_bad_public_key(self, public_key):
        """Public keys must be 32 bytes."""
        private_key, _ = generate_keypair()
        with pytest.raises(KeyMaterialError):
            Identity("alice", public_key, private_key)

    def test_bad_private_key(self):
        """Private keys must be 32 bytes."""
        _, public_key = generate_keypair()
        with pytest.raises(KeyMaterialError):
            Identity("alice", public_key, b"x" * 16)

    def test_inconsistent_pair(self):
        """The public key must belong to the private key."""
        private_key, _ = generate_keypair()
        _, other_public = generate_keypair()

        with pytest.raises(KeyMaterialError) as exc_info:
            Identity("alice", other_public, private_key)

        assert exc_info.value.key_id == "alice"
