import base64

import pytest

import objsig.api as api
from objsig.api import fingerprint, signature, verify
from objsig.core.config import FingerprintConfig
from objsig.core.digest import AlgorithmId, OutputFormat, split_prefix
from objsig.core.errors import (
    CyclicStructureError,
    InvalidAlgorithmError,
    InvalidFormatError,
)


def test_known_md5_hex():
    assert signature({"a": 1, "b": 2}) == "608de49a4600dbb5b173492759792e4a"
    assert signature(None) == "37a6259cc0c1dae299a7866489dff0bd"


def test_known_sha256():
    assert signature([1, 2.5, "é"], digest="SHA256") == (
        "444271acaa0a89dc8b13324ccb82c8980dfe2959f3482b10abcdafa8092d7ed6"
    )


def test_determinism():
    obj = {"b": [1, 2], "a": True, "c": {"z": None, "y": 1.5}}
    assert signature(obj) == signature(obj)
    assert fingerprint(obj) == signature(obj)


def test_key_order_invariance():
    assert signature({"a": 1, "b": 2}) == signature({"b": 2, "a": 1})


def test_numeric_representation_invariance():
    assert signature(4) == signature(4.0)
    assert signature({"n": [4, 2.0]}, digest="SHA256") == signature({"n": [4.0, 2]}, digest="SHA256")


def test_sensitivity():
    base = {"a": 1, "b": [1, 2], "c": "x"}
    variants = [
        {"a": 2, "b": [1, 2], "c": "x"},
        {"a": 1, "b": [2, 1], "c": "x"},
        {"a": 1, "b": [1, 2]},
        {"a": 1, "b": [1, 2], "c": "x", "d": None},
        {"a": 1, "b": [1, 2], "c": "y"},
        {"a": 1.5, "b": [1, 2], "c": "x"},
    ]
    sigs = {signature(v) for v in variants}
    assert signature(base) not in sigs
    assert len(sigs) == len(variants)


def test_empty_list_dict_null_differ():
    assert len({signature([]), signature({}), signature(None)}) == 3


# -------------------------
# Output formats
# -------------------------
def test_base64url_has_no_unsafe_chars():
    sig = signature("x", digest="SHA1", format="Base64Url")
    assert sig == "qB-iDWJfyOWgRyHN9h8Fb8LiJJY"
    assert not set("+/=") & set(sig)


def test_base64_is_padded_mime():
    assert signature("x", digest="SHA1", format="b64digest") == "qB+iDWJfyOWgRyHN9h8Fb8LiJJY="


def test_formats_decode_to_raw():
    value = {"k": ["v", 1, None]}
    for algo in AlgorithmId:
        raw = signature(value, digest=algo, format="digest")
        hex_sig = signature(value, digest=algo, format="hexdigest")
        b64 = signature(value, digest=algo, format="b64digest")
        b64u = signature(value, digest=algo, format="b64udigest")

        assert isinstance(raw, bytes)
        assert bytes.fromhex(hex_sig) == raw
        assert base64.b64decode(b64) == raw
        assert base64.urlsafe_b64decode(b64u + "=" * (-len(b64u) % 4)) == raw


def test_hex_is_lowercase():
    sig = signature({"a": 1}, digest="SHA512")
    assert sig == sig.lower()
    assert len(sig) == 128


def test_format_aliases():
    assert signature(1, format="hex") == signature(1, format=OutputFormat.HEX)
    assert signature(1, format="Raw") == signature(1, format="digest")
    assert signature(1, format="BASE64") == signature(1, format="b64digest")


# -------------------------
# Prefix
# -------------------------
def test_prefix_uses_algorithm_literal():
    sig = signature([1], digest="SHA256", prefix=True)
    assert sig.startswith("SHA256:")
    assert sig[len("SHA256:"):] == signature([1], digest="SHA256")


def test_prefix_on_raw_is_bytes():
    sig = signature([1], digest="MD5", format="digest", prefix=True)
    assert sig.startswith(b"MD5:")
    assert len(sig) == len(b"MD5:") + 16


def test_split_prefix():
    sig = signature("v", digest="SHA1", prefix=True)
    algo, rest = split_prefix(sig)
    assert algo is AlgorithmId.SHA1
    assert rest == signature("v", digest="SHA1")
    assert split_prefix("abc") == (None, "abc")
    assert split_prefix("nope:abc") == (None, "nope:abc")


# -------------------------
# Errors
# -------------------------
def test_invalid_format_before_canonicalization(monkeypatch):
    calls = []
    monkeypatch.setattr(api, "canonicalize", lambda *a, **kw: calls.append(a))

    with pytest.raises(InvalidFormatError):
        signature({"a": 1}, format="bogus")
    assert calls == []


def test_invalid_format_never_calls_serializer():
    def ser(value):
        raise AssertionError("serializer should not run")

    with pytest.raises(InvalidFormatError):
        signature({"a": 1}, format="bogus", serializer=ser)


def test_invalid_algorithm():
    with pytest.raises(InvalidAlgorithmError):
        signature(1, digest="CRC32")
    with pytest.raises(InvalidAlgorithmError):
        signature(1, digest="sha256")


def test_bad_format_wins_over_bad_digest():
    with pytest.raises(InvalidFormatError):
        signature(1, digest="CRC32", format="bogus")


def test_cycle_propagates():
    d = {}
    d["self"] = d
    with pytest.raises(CyclicStructureError):
        signature(d)


# -------------------------
# Entry points
# -------------------------
def test_options_map():
    options = {"data": {"a": 1}, "digest": "SHA1", "format": "b64udigest", "prefix": True}
    sig = signature(**options)
    assert sig.startswith("SHA1:")
    assert sig == fingerprint({"a": 1}, FingerprintConfig(digest="SHA1", format="b64udigest", prefix=True))


def test_custom_serializer():
    sig = signature({"a": 1}, serializer=lambda v: b'{"a":1,"b":2}')
    assert sig == signature({"a": 1, "b": 2})


def test_verify():
    value = {"a": [1, 2]}
    assert verify(value, signature(value))
    assert not verify({"a": [2, 1]}, signature(value))


def test_verify_uses_prefix_algorithm():
    value = {"a": 1}
    old = signature(value, digest="SHA1", prefix=True)
    assert verify(value, old, digest="SHA256")
    assert not verify({"a": 2}, old, digest="SHA256")


def test_verify_raw():
    value = [1]
    raw = signature(value, format="digest")
    assert verify(value, raw, format="digest")
    assert not verify(value, raw.hex(), format="digest")


def test_verify_missing_signature():
    assert verify([1], None) is False
    assert verify([1], 12345) is False
    with pytest.raises(InvalidFormatError):
        verify([1], None, format="bogus")


def test_verify_bytearray():
    raw = signature([1], format="digest")
    assert verify([1], bytearray(raw), format="digest")
