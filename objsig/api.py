import hmac
import logging

from objsig.core.canonical import canonicalize
from objsig.core.config import FingerprintConfig
from objsig.core.digest import (
    AlgorithmId,
    OutputFormat,
    add_prefix,
    digest_bytes,
    format_digest,
    split_prefix,
)

logger = logging.getLogger(__name__)


def fingerprint(value, config=None):
    """
    Return the signature of ``value`` under ``config``.

    The result is a str, or bytes when the format is RAW.
    """
    if config is None:
        config = FingerprintConfig()
    data = canonicalize(value, config.serializer)
    raw = digest_bytes(data, config.digest)
    out = format_digest(raw, config.format)
    logger.debug(
        "fingerprint %s/%s over %d bytes", config.digest.value, config.format.value, len(data)
    )
    if config.prefix:
        out = add_prefix(out, config.digest)
    return out


def signature(data=None, digest="MD5", format="hexdigest", prefix=False, serializer=None):
    """
    Generate a portable signature of ``data``.

        signature(obj)
        signature(data=obj, digest="SHA1", format="b64udigest", prefix=True)
        signature(**options)
    """
    config = FingerprintConfig(
        digest=digest,
        format=format,
        prefix=prefix,
        serializer=serializer,
    )
    return fingerprint(data, config)


def verify(data, expected, digest="MD5", format="hexdigest", serializer=None):
    """
    Check ``expected`` against a fresh signature of ``data``.

    A prefixed ``expected`` selects its own algorithm, so signatures made
    with older algorithms keep verifying after the default changes.
    """
    if not isinstance(expected, (str, bytes, bytearray)):
        # still reject a bad configuration, even with nothing to compare
        FingerprintConfig(digest=digest, format=format, serializer=serializer)
        return False
    if isinstance(expected, bytearray):
        expected = bytes(expected)

    algorithm, _ = split_prefix(expected)
    config = FingerprintConfig(
        digest=algorithm if algorithm is not None else digest,
        format=format,
        prefix=algorithm is not None,
        serializer=serializer,
    )
    actual = fingerprint(data, config)
    if isinstance(actual, str):
        if not isinstance(expected, str):
            return False
        return hmac.compare_digest(actual.encode("utf-8"), expected.encode("utf-8"))
    if not isinstance(expected, bytes):
        return False
    return hmac.compare_digest(actual, expected)


__all__ = ["AlgorithmId", "FingerprintConfig", "OutputFormat", "fingerprint", "signature", "verify"]
