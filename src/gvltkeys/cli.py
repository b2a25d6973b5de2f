#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path

from .config import Settings
from .errors import KeyDerivationError
from .keygen import compute_key, derive_batch, generate_key
from .mnemonic_codec import ENTROPY_BITS, WORD_COUNTS

FORMATS = ("json", "prettyjson", "text")
EXIT_IO_ERROR = 20


def print_report(report, fmt: str, include_private: bool = False):
    out = report.to_dict(include_private=include_private)
    if fmt == "json":
        print(json.dumps(out))
    elif fmt == "prettyjson":
        print(json.dumps(out, indent=2))
    else:
        for value in out.values():
            print(value)


def cmd_keygen(args, settings: Settings):
    """
    gvltkeys keygen [-p PASSWORD] [-f FILE] [--words 24]
    """
    bits = None
    if args.words is not None:
        bits = ENTROPY_BITS[WORD_COUNTS.index(args.words)]
    settings = settings.override(password=args.password, path=args.path, entropy_bits=bits)
    report = generate_key(settings)

    if args.file:
        Path(args.file).write_text(report.mnemonic)

    print_report(report, args.format, args.show_private)


def cmd_compute_key(args, settings: Settings):
    """
    gvltkeys compute-key --mnemonic "<phrase>" [--password PASSWORD]
    """
    settings = settings.override(password=args.password, path=args.path)
    report = compute_key(args.mnemonic, settings)
    print_report(report, args.format, args.show_private)


def _read_phrases(source: str):
    text = sys.stdin.read() if source == "-" else Path(source).read_text()
    return [line.strip() for line in text.splitlines() if line.strip()]


def cmd_batch(args, settings: Settings):
    """
    gvltkeys batch PHRASE_FILE [--password PASSWORD] [--workers N]

    One mnemonic per line ("-" reads stdin). Exits with the code of the
    first failing phrase, after printing every result.
    """
    settings = settings.override(password=args.password, path=args.path, workers=args.workers)
    results = derive_batch(
        _read_phrases(args.phrases),
        settings.password,
        settings.path,
        settings.hrp,
        workers=settings.workers,
    )

    rows = []
    for r in results:
        row = {"index": r.index}
        if r.ok:
            row["account_id"] = str(r.account)
        else:
            row["error"] = str(r.error)
        rows.append(row)

    if args.format == "json":
        print(json.dumps(rows))
    elif args.format == "prettyjson":
        print(json.dumps(rows, indent=2))
    else:
        for row in rows:
            print(row.get("account_id") or f"error: {row['error']}")

    failed = [r for r in results if not r.ok]
    return failed[0].error.exit_code if failed else 0


def _add_common(p):
    p.add_argument("--path", help="derivation path (env GVLT_DERIVATION_PATH)")
    p.add_argument("-F", "--format", choices=FORMATS, default="json", help="output format")
    p.add_argument(
        "--show-private", action="store_true", help="also print the xprv of the derived key"
    )


def build_parser():
    p = argparse.ArgumentParser(prog="gvltkeys", description="Gevulot key derivation")
    p.add_argument("--hrp", help="account address prefix (env GVLT_HRP)")
    sub = p.add_subparsers(dest="cmd")

    # keygen
    k = sub.add_parser("keygen", help="generate a new mnemonic and account")
    k.add_argument("-f", "--file", help="file to write the mnemonic to")
    k.add_argument("-p", "--password", help="BIP39 passphrase (env GEVULOT_PASSWORD)")
    k.add_argument("--words", type=int, choices=WORD_COUNTS, help="mnemonic length")
    _add_common(k)
    k.set_defaults(func=cmd_keygen)

    # compute-key
    c = sub.add_parser("compute-key", help="derive the account of an existing mnemonic")
    c.add_argument("--mnemonic", help="mnemonic phrase (env GEVULOT_MNEMONIC)")
    c.add_argument("--password", help="BIP39 passphrase (env GEVULOT_PASSWORD)")
    _add_common(c)
    c.set_defaults(func=cmd_compute_key)

    # batch
    b = sub.add_parser("batch", help="derive account ids for a file of mnemonics")
    b.add_argument("phrases", help="file with one mnemonic per line, or - for stdin")
    b.add_argument("--password", help="BIP39 passphrase (env GEVULOT_PASSWORD)")
    b.add_argument("--workers", type=int, help="worker processes (env GVLT_WORKERS)")
    b.add_argument("--path", help="derivation path (env GVLT_DERIVATION_PATH)")
    b.add_argument("-F", "--format", choices=FORMATS, default="json", help="output format")
    b.set_defaults(func=cmd_batch)

    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = Settings.from_env().override(hrp=args.hrp)
        logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
        return args.func(args, settings) or 0
    except KeyDerivationError as e:
        print(f"error: {e}", file=sys.stderr)
        return e.exit_code
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
