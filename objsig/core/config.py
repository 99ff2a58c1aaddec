# objsig/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .canonical import Serializer
from .digest import AlgorithmId, OutputFormat, new_digest
from .errors import SignatureError

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FingerprintConfig:
    digest: AlgorithmId = AlgorithmId.MD5
    format: OutputFormat = OutputFormat.HEX
    prefix: bool = False
    serializer: Optional[Serializer] = None

    def __post_init__(self) -> None:
        # format first, so a bad format wins over a bad digest
        object.__setattr__(self, "format", OutputFormat.parse(self.format))
        object.__setattr__(self, "digest", AlgorithmId.parse(self.digest))
        object.__setattr__(self, "prefix", bool(self.prefix))
        self.validate()

    @classmethod
    def load(cls) -> "FingerprintConfig":
        digest = os.environ.get("OBJSIG_DIGEST", AlgorithmId.MD5.value)
        fmt = os.environ.get("OBJSIG_FORMAT", OutputFormat.HEX.value)
        prefix = os.environ.get("OBJSIG_PREFIX", "").strip().lower() in _TRUE
        return cls(digest=digest, format=fmt, prefix=prefix)

    def validate(self) -> None:
        if self.serializer is not None and not callable(self.serializer):
            raise SignatureError("serializer must be callable")
        # raises InvalidAlgorithmError if hashlib cannot build it here
        new_digest(self.digest)
