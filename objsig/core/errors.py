# objsig/core/errors.py
from __future__ import annotations


class SignatureError(Exception):
    """Base class for signature errors."""


class InvalidFormatError(SignatureError, ValueError):
    def __init__(self, fmt, choices=()):
        msg = f"Invalid digest format: {fmt!r}"
        if choices:
            msg += f" (expected one of: {', '.join(choices)})"
        super().__init__(msg)
        self.format = fmt


class InvalidAlgorithmError(SignatureError, ValueError):
    def __init__(self, algorithm, reason=None):
        msg = f"Unsupported digest algorithm: {algorithm!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
        self.algorithm = algorithm


class UnsupportedTypeError(SignatureError, TypeError):
    def __init__(self, path, type_name, reason="no to_value() conversion"):
        super().__init__(f"Cannot canonicalize {path}: {type_name} ({reason})")
        self.path = path
        self.type_name = type_name


class CyclicStructureError(SignatureError, ValueError):
    def __init__(self, path):
        super().__init__(f"Cyclic reference detected at {path}")
        self.path = path


class EncodingError(SignatureError, ValueError):
    pass
