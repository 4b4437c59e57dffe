"""Payload codecs: typed value <-> opaque bytes.

A codec is anything with a ``name`` and ``encode``/``decode`` methods. The
stock codecs are registered by name so that a sealed value can record which
one produced its plaintext and configuration can select a default.

Decoding failures raise :class:`~veil.core.exceptions.CodecError`. They are
not access denials and are never collapsed into ``None``.
"""

from __future__ import annotations

import json
import logging
import pickle
from typing import Any, Protocol, runtime_checkable

from veil.core.exceptions import CodecError, ConfigException

logger = logging.getLogger(__name__)


@runtime_checkable
class PayloadCodec(Protocol):
    """Converts payloads of one type to and from bytes."""

    name: str

    def encode(self, value: Any) -> bytes: ...
    def decode(self, data: bytes) -> Any: ...


class PickleCodec:
    """Arbitrary Python objects via :mod:`pickle`.

    Only decode bytes that came out of a sealed value you trust: unpickling
    executes code.
    """

    name = "pickle"

    def encode(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise CodecError(f"Cannot pickle {type(value).__name__}: {e}", codec=self.name) from e

    def decode(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except Exception as e:
            raise CodecError(f"Malformed pickle payload: {e}", codec=self.name) from e


class JSONCodec:
    """JSON-compatible payloads, UTF-8 encoded."""

    name = "json"

    def encode(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":"), sort_keys=True).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode {type(value).__name__} as JSON: {e}", codec=self.name) from e

    def decode(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CodecError(f"Malformed JSON payload: {e}", codec=self.name) from e


class TextCodec:
    """``str`` payloads, UTF-8 encoded."""

    name = "text"

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, str):
            raise CodecError(f"Text codec expects str, got {type(value).__name__}", codec=self.name)
        return value.encode("utf-8")

    def decode(self, data: bytes) -> Any:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CodecError(f"Malformed UTF-8 payload: {e}", codec=self.name) from e


class BytesCodec:
    """``bytes`` payloads, passed through unchanged."""

    name = "bytes"

    def encode(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise CodecError(f"Bytes codec expects bytes, got {type(value).__name__}", codec=self.name)
        return bytes(value)

    def decode(self, data: bytes) -> Any:
        return bytes(data)


_CODECS: dict[str, PayloadCodec] = {
    codec.name: codec for codec in (PickleCodec(), JSONCodec(), TextCodec(), BytesCodec())
}


def register_codec(codec: PayloadCodec) -> None:
    """Make ``codec`` resolvable by name, replacing any codec of that name."""
    if not isinstance(codec, PayloadCodec):
        raise TypeError(f"{type(codec).__name__} does not implement PayloadCodec")
    if codec.name in _CODECS:
        logger.info(f"Replacing codec {codec.name!r}")
    _CODECS[codec.name] = codec


def get_codec(name: str | None = None) -> PayloadCodec:
    """Resolve a codec by name; None selects the configured default.

    Raises:
        ConfigException: If no codec is registered under the name
    """
    if name is None:
        from veil.core.config import get_config

        name = get_config().default_codec
    try:
        return _CODECS[name]
    except KeyError:
        raise ConfigException(f"Unknown codec: {name}", setting="default_codec") from None


def resolve_codec(codec: PayloadCodec | str | None) -> PayloadCodec:
    """Accept a codec instance, a registered name, or None for the default."""
    if codec is None or isinstance(codec, str):
        return get_codec(codec)
    return codec
