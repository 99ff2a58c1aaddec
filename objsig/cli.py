import argparse
import json
import logging
import sys

from objsig.api import fingerprint, verify
from objsig.core.canonical import canonical_msgpack, canonicalize
from objsig.core.config import FingerprintConfig
from objsig.core.digest import AlgorithmId
from objsig.core.errors import SignatureError

SERIALIZERS = {
    "json": None,
    "msgpack": canonical_msgpack,
}


def _read_json(path):
    if path == "-":
        return json.load(sys.stdin)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _write_bytes(data):
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


def build_parser(defaults):
    parser = argparse.ArgumentParser(prog="objsig", description="Portable signatures of JSON data")
    parser.add_argument("file", nargs="?", default="-", help="JSON input (default: stdin)")
    parser.add_argument(
        "--digest",
        default=defaults.digest.value,
        choices=[a.value for a in AlgorithmId],
    )
    parser.add_argument(
        "--format",
        default=defaults.format.value,
        help="digest, hexdigest, b64digest or b64udigest",
    )
    parser.add_argument("--prefix", action=argparse.BooleanOptionalAction, default=defaults.prefix)
    parser.add_argument("--serializer", choices=sorted(SERIALIZERS), default="json")
    parser.add_argument("--verify", metavar="SIG", help="check SIG instead of printing")
    parser.add_argument("--canonical", action="store_true", help="print canonical JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None):
    try:
        defaults = FingerprintConfig.load()
    except SignatureError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    args = build_parser(defaults).parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        data = _read_json(args.file)
    except (OSError, ValueError) as e:
        print(f"error: cannot read {args.file}: {e}", file=sys.stderr)
        return 2

    serializer = SERIALIZERS[args.serializer]

    try:
        if args.canonical:
            _write_bytes(canonicalize(data) + b"\n")
            return 0

        if args.verify is not None:
            ok = verify(
                data,
                args.verify,
                digest=args.digest,
                format=args.format,
                serializer=serializer,
            )
            print("OK" if ok else "MISMATCH")
            return 0 if ok else 1

        config = FingerprintConfig(
            digest=args.digest,
            format=args.format,
            prefix=args.prefix,
            serializer=serializer,
        )
        sig = fingerprint(data, config)
    except SignatureError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if isinstance(sig, bytes):
        _write_bytes(sig)
    else:
        print(sig)
    return 0


if __name__ == "__main__":
    sys.exit(main())
