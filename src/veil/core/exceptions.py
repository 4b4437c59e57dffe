# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Exception hierarchy for Veil.

Access denial is not an exception: ``reveal`` and ``open_sealed`` return
``None`` for a party without access and for every cryptographic failure
alike. The types below cover the cases that indicate a bug or bad input
rather than a security boundary.
"""

from __future__ import annotations

from typing import Any


class VeilException(Exception):  # noqa: N818
    """Base exception for all Veil errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class CodecError(VeilException):
    """Exception for payload encoding/decoding failures.

    Raised when:
    - Bytes handed to a codec's ``decode`` are malformed
    - A payload cannot be represented by the selected codec
    """

    def __init__(self, message: str, codec: str | None = None):
        details = {}
        if codec:
            details["codec"] = codec
        super().__init__(message, details)
        self.codec = codec


class KeyMaterialError(VeilException):
    """Exception for malformed key material.

    Raised when:
    - An identity is built from keys of the wrong length or type
    - A registry entry is not a raw public key
    - A recipient's public key cannot be loaded while sealing
    """

    def __init__(self, message: str, key_id: str | None = None, length: Any = None):
        details = {}
        if key_id:
            details["key_id"] = key_id
        if length is not None:
            details["length"] = str(length)
        super().__init__(message, details)
        self.key_id = key_id
        self.length = length


class ConfigException(VeilException):
    """Exception for configuration errors.

    Raised when:
    - A configured codec name is unknown
    - A configured log format is unknown
    """

    def __init__(self, message: str, setting: str | None = None):
        details = {}
        if setting:
            details["setting"] = setting
        super().__init__(message, details)
        self.setting = setting
