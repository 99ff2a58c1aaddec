# objsig/core/digest.py
from __future__ import annotations

import base64
import hashlib
from enum import Enum
from typing import Optional, Tuple, Union

from .errors import InvalidAlgorithmError, InvalidFormatError


class AlgorithmId(str, Enum):
    """Digest algorithms, named by the literal used in prefixes."""

    MD5 = "MD5"
    SHA1 = "SHA1"
    SHA224 = "SHA224"
    SHA256 = "SHA256"
    SHA384 = "SHA384"
    SHA512 = "SHA512"
    SHA3_224 = "SHA3_224"
    SHA3_256 = "SHA3_256"
    SHA3_384 = "SHA3_384"
    SHA3_512 = "SHA3_512"
    BLAKE2b_512 = "BLAKE2b_512"
    BLAKE2s_256 = "BLAKE2s_256"

    @classmethod
    def parse(cls, value) -> "AlgorithmId":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise InvalidAlgorithmError(value, f"expected one of: {', '.join(a.value for a in cls)}")


class OutputFormat(str, Enum):
    """Digest output encodings."""

    RAW = "digest"
    HEX = "hexdigest"
    BASE64 = "b64digest"
    BASE64URL = "b64udigest"

    @classmethod
    def parse(cls, value) -> "OutputFormat":
        """Accept a member, its value, or its name, case-insensitively."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            found = _FORMAT_ALIASES.get(value.lower())
            if found is not None:
                return found
        raise InvalidFormatError(value, [f.value for f in cls])


_FORMAT_ALIASES = {}
for _fmt in OutputFormat:
    _FORMAT_ALIASES[_fmt.value] = _fmt
    _FORMAT_ALIASES[_fmt.name.lower()] = _fmt

_HASHLIB_NAMES = {
    AlgorithmId.MD5: "md5",
    AlgorithmId.SHA1: "sha1",
    AlgorithmId.SHA224: "sha224",
    AlgorithmId.SHA256: "sha256",
    AlgorithmId.SHA384: "sha384",
    AlgorithmId.SHA512: "sha512",
    AlgorithmId.SHA3_224: "sha3_224",
    AlgorithmId.SHA3_256: "sha3_256",
    AlgorithmId.SHA3_384: "sha3_384",
    AlgorithmId.SHA3_512: "sha3_512",
    AlgorithmId.BLAKE2b_512: "blake2b",
    AlgorithmId.BLAKE2s_256: "blake2s",
}


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64u(raw: bytes) -> str:
    # unpadded, like most URL/filesystem uses
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


_FORMATTERS = {
    OutputFormat.RAW: bytes,
    OutputFormat.HEX: bytes.hex,
    OutputFormat.BASE64: _b64,
    OutputFormat.BASE64URL: _b64u,
}


def new_digest(algorithm: AlgorithmId):
    """Return a fresh hashlib context for ``algorithm``."""
    name = _HASHLIB_NAMES[algorithm]
    try:
        return hashlib.new(name, usedforsecurity=False)
    except (ValueError, TypeError) as e:
        raise InvalidAlgorithmError(algorithm.value, str(e)) from e


def digest_bytes(data: bytes, algorithm: AlgorithmId) -> bytes:
    h = new_digest(algorithm)
    h.update(data)
    return h.digest()


def format_digest(raw: bytes, fmt: OutputFormat) -> Union[str, bytes]:
    return _FORMATTERS[fmt](raw)


def add_prefix(formatted: Union[str, bytes], algorithm: AlgorithmId) -> Union[str, bytes]:
    if isinstance(formatted, bytes):
        return algorithm.value.encode("ascii") + b":" + formatted
    return f"{algorithm.value}:{formatted}"


def split_prefix(signature: Union[str, bytes]) -> Tuple[Optional[AlgorithmId], Union[str, bytes]]:
    """
    Split ``"SHA256:abc..."`` into ``(AlgorithmId.SHA256, "abc...")``.
    Signatures without a known algorithm prefix come back unchanged with None.
    """
    if isinstance(signature, bytes):
        head, sep, rest = signature.partition(b":")
        name = head.decode("ascii", errors="replace")
    else:
        name, sep, rest = signature.partition(":")
    if sep:
        try:
            return AlgorithmId(name), rest
        except ValueError:
            pass
    return None, signature
