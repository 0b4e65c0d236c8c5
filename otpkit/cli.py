"""
cli.py — command line front end for otpkit.

Subcommands:
- hotp   : HOTP code for a counter
- totp   : TOTP code for now (or --at TIMESTAMP)
- watch  : live TOTP codes, one line per period boundary (Ctrl+C to quit)
- verify : check a TOTP / HOTP code
- base32 : encode / decode Base32 text

The secret comes from --secret (Base32) or from --config, a JSON file holding
one generator record or a list of them:

    [{"name": "github", "key": "JBSWY3DPEHPK3PXP", "period": 30},
     {"name": "vpn", "key": "GEZDGNBVGY3TQOJQ", "digits": 8, "algorithm": "SHA256", "period": 60}]

eg..:
    otpkit hotp --secret GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ --counter 1
    otpkit totp --config accounts.json --name vpn
    otpkit watch --config accounts.json
    otpkit verify totp --secret JBSWY3DPEHPK3PXP --code 123456 --window 1
    otpkit base32 decode MZXW6YTBOI======

Exit status: 0 ok, 1 code rejected by verify, 2 bad input.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import List, Optional, Tuple

from . import __version__, base32
from .algorithms import HashAlgorithm
from .config import load_records
from .exceptions import OTPError
from .hotp import DEFAULT_ALGORITHM, DEFAULT_DIGITS, HOTP
from .scheduler import PeriodicCodeScheduler
from .totp import DEFAULT_PERIOD, TOTP

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_INVALID = 2


class CLIError(Exception):
    """Bad command line input that is not an OTPError (missing file, bad JSON...)."""


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[+] %(message)s",
        stream=sys.stderr,
    )


# --- Generator resolution ---------------------------------------------------
def _read_config(path: str) -> List[Tuple[str, object]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise CLIError("Config file not found: %s" % path) from e
    except json.JSONDecodeError as e:
        raise CLIError("Config file %s is not valid JSON: %s" % (path, e)) from e

    records = data if isinstance(data, list) else [data]
    generators = load_records(data)
    names = []
    for index, record in enumerate(records):
        name = record.get("name") if isinstance(record, dict) else None
        names.append(name or "#%d" % index)
    return list(zip(names, generators))


def load_generators(args) -> List[Tuple[str, object]]:
    """(name, HOTP|TOTP) pairs from --secret or --config, --name filtered."""
    if args.secret is not None:
        hotp = HOTP.from_base32(
            args.secret.replace(" ", ""),
            digits=DEFAULT_DIGITS if args.digits is None else args.digits,
            algorithm=DEFAULT_ALGORITHM if args.algorithm is None else args.algorithm,
            casefold=True,
        )
        return [("secret", hotp)]
    if not args.config:
        raise CLIError("Either --secret or --config is required")

    generators = _read_config(args.config)
    if args.name:
        generators = [(name, gen) for name, gen in generators if name == args.name]
        if not generators:
            raise CLIError("No record named %r in %s" % (args.name, args.config))
    if not generators:
        raise CLIError("No generator records in %s" % args.config)
    return generators


def _as_hotp(args, generator) -> HOTP:
    hotp = generator.hotp if isinstance(generator, TOTP) else generator
    if args.config and (args.digits is not None or args.algorithm is not None):
        # command line overrides the record
        hotp = HOTP(
            hotp.key,
            hotp.digits if args.digits is None else args.digits,
            hotp.algorithm if args.algorithm is None else args.algorithm,
        )
    return hotp


def _as_totp(args, generator) -> TOTP:
    hotp = _as_hotp(args, generator)
    period = args.period
    if period is None:
        period = generator.period if isinstance(generator, TOTP) else DEFAULT_PERIOD
    return TOTP(hotp, period)


# --- CLI command handlers ---------------------------------------------------
def cmd_help(args) -> int:
    print("'otpkit -h' for help.")
    return EXIT_OK


def cmd_hotp(args) -> int:
    name, generator = load_generators(args)[0]
    hotp = _as_hotp(args, generator)
    code = hotp.code(args.counter)
    logger.debug("[%s] HOTP(%dd, %s, counter=%d)", name, hotp.digits, hotp.algorithm, args.counter)
    print(code)
    return EXIT_OK


def cmd_totp(args) -> int:
    name, generator = load_generators(args)[0]
    totp = _as_totp(args, generator)
    at = args.at if args.at is not None else time.time()
    code = totp.code(at)
    print(f"{code}  (valid ~{int(totp.time_remaining(at)):2d}s)")
    return EXIT_OK


async def _watch(named_totps: List[Tuple[str, TOTP]], period: Optional[float], count: Optional[int]) -> None:
    scheduler = PeriodicCodeScheduler()
    totps = [totp for _, totp in named_totps]
    if len(totps) == 1:
        subscription = scheduler.subscribe(totps[0])
    else:
        subscription = scheduler.subscribe_many(totps, period=period)

    emitted = 0
    async with subscription:
        async for value in subscription:
            now = time.time()
            codes = [value] if isinstance(value, str) else value
            for (name, totp), code in zip(named_totps, codes):
                label = f"{name}: " if len(named_totps) > 1 else ""
                print(f"{label}{code}  (valid ~{int(totp.time_remaining(now)):2d}s)", flush=True)
            emitted += 1
            if count is not None and emitted >= count:
                subscription.cancel()


def cmd_watch(args) -> int:
    generators = load_generators(args)
    cadence = None
    if len(generators) > 1:
        # several records: --period is the shared cadence, each keeps its own period
        cadence, args.period = args.period, None
    named = [(name, _as_totp(args, gen)) for name, gen in generators]
    if args.count is None:
        print("Press Ctrl+C to quit. Generating TOTP in real time...\n")
    try:
        asyncio.run(_watch(named, cadence, args.count))
    except KeyboardInterrupt:
        print("\nBye.")
    return EXIT_OK


def cmd_verify_totp(args) -> int:
    name, generator = load_generators(args)[0]
    totp = _as_totp(args, generator)
    at = args.at if args.at is not None else time.time()
    if totp.verify(args.code, at=at, window=args.window):
        print(f"[{name}] [+] TOTP code is VALID")
        return EXIT_OK
    print(f"[{name}] [-] TOTP code is INVALID")
    return EXIT_REJECTED


def cmd_verify_hotp(args) -> int:
    name, generator = load_generators(args)[0]
    hotp = _as_hotp(args, generator)
    ok, next_counter = hotp.verify(args.code, args.counter, look_ahead=args.look_ahead)
    if ok:
        print(f"[{name}] [+] HOTP code is VALID (next counter = {next_counter})")
        return EXIT_OK
    print(f"[{name}] [-] HOTP code is INVALID")
    return EXIT_REJECTED


def cmd_base32_encode(args) -> int:
    data = bytes.fromhex(args.value) if args.hex else args.value.encode("utf-8")
    print(base32.encode(data))
    return EXIT_OK


def cmd_base32_decode(args) -> int:
    print(base32.decode(args.value, casefold=args.casefold).hex())
    return EXIT_OK


# --- Argparse builder -------------------------------------------------------
def _positive_float(value: str) -> float:
    number = float(value)
    if not number > 0:
        raise argparse.ArgumentTypeError("must be a positive number of seconds")
    return number


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otpkit", description="TOTP/HOTP generator and verifier (RFC 4226 / RFC 6238)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help, verbose=False)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--secret", help="Base32 secret")
    common.add_argument("--config", help="JSON file with one generator record or a list of them")
    common.add_argument("--name", help="Pick the record with this name from --config")
    common.add_argument("--digits", type=int, help="Override number of digits")
    common.add_argument("--algorithm", type=HashAlgorithm.parse, help="SHA1, SHA256, SHA384 or SHA512")
    common.add_argument("--verbose", action="store_true", help="Verbose output")

    timed = argparse.ArgumentParser(add_help=False)
    timed.add_argument("--period", type=_positive_float, help="Override TOTP period (seconds)")
    timed.add_argument("--at", type=float, help="Unix timestamp to use instead of now")

    # hotp
    ph = sub.add_parser("hotp", parents=[common], help="Generate HOTP code for a specific counter")
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    # totp
    pt = sub.add_parser("totp", parents=[common, timed], help="Generate the current TOTP code")
    pt.set_defaults(func=cmd_totp)

    # watch
    pw = sub.add_parser("watch", parents=[common], help="Show TOTP codes in real time")
    pw.add_argument("--period", type=_positive_float, help="TOTP period, or the shared refresh period when watching several records")
    pw.add_argument("--count", type=_positive_int, help="Stop after this many updates")
    pw.set_defaults(func=cmd_watch)

    # verify
    pv = sub.add_parser("verify", help="Verify an OTP code (TOTP or HOTP)")
    pv.set_defaults(func=lambda args: pv.print_help() or EXIT_INVALID)
    sub_v = pv.add_subparsers(dest="verify_type")

    pvt = sub_v.add_parser("totp", parents=[common, timed], help="Verify a TOTP code")
    pvt.add_argument("--code", required=True, help="OTP code to verify")
    pvt.add_argument("--window", type=int, default=1, help="Allowed +/- step window")
    pvt.set_defaults(func=cmd_verify_totp)

    pvh = sub_v.add_parser("hotp", parents=[common], help="Verify a HOTP code")
    pvh.add_argument("--code", required=True, help="OTP code to verify")
    pvh.add_argument("--counter", type=int, required=True, help="Current HOTP counter")
    pvh.add_argument("--look-ahead", type=int, default=0, help="Allowed counter look-ahead")
    pvh.set_defaults(func=cmd_verify_hotp)

    # base32
    pb = sub.add_parser("base32", help="Base32 encode / decode (RFC 4648)")
    pb.set_defaults(func=lambda args: pb.print_help() or EXIT_INVALID)
    sub_b = pb.add_subparsers(dest="base32_op")

    pbe = sub_b.add_parser("encode", help="Encode text (or --hex bytes) as Base32")
    pbe.add_argument("value")
    pbe.add_argument("--hex", action="store_true", help="VALUE is hex encoded bytes")
    pbe.set_defaults(func=cmd_base32_encode)

    pbd = sub_b.add_parser("decode", help="Decode Base32, print the bytes as hex")
    pbd.add_argument("value")
    pbd.add_argument("--casefold", action="store_true", help="Accept lowercase input")
    pbd.set_defaults(func=cmd_base32_decode)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except (OTPError, CLIError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return EXIT_INVALID
    except ValueError as e:  # bytes.fromhex on base32 encode --hex
        print(f"[!] Invalid input: {e}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
