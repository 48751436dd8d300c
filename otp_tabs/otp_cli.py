#!/usr/bin/env python3
"""
otp_cli.py — Command-line entry point for otp-tabs.

Subcommands:
- tui    : interactive tabs, one TOTP session per tab (default)
- code   : print the current code for each secret and exit
- watch  : live codes for several secrets, refreshed every second
- decode : show how a secret is read and the resulting key bytes
"""

import argparse
import logging
import sys
import time
from typing import List, Optional, Sequence

from otp_tabs import __version__
from otp_tabs.config import CodeConfig, load_config
from otp_tabs.errors import ConfigError, OTPTabsError
from otp_tabs.events import App
from otp_tabs.formatting import format_code
from otp_tabs.key_decoder import decode_secret_verbose
from otp_tabs.otp_core import current_timestamp, derive

logger = logging.getLogger("otp_tabs")


def setup_logging(verbose: bool, log_file: Optional[str] = None) -> None:
    """
    Send otp_tabs log records to stderr (or `log_file`).

    Without --verbose only warnings and errors are shown.
    """
    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def build_app(config: CodeConfig, secrets: Sequence[str], names: Sequence[str] = ()) -> App:
    """An App with one session per secret (the first reuses the initial tab)."""
    app = App(config)
    store = app.store
    for index, secret in enumerate(secrets):
        if index > 0:
            store.add()
        if index < len(names):
            store.set_name(index, names[index])
        store.confirm_rename(index)
        store.set_secret(index, secret)
    if secrets:
        store.select(0)
    return app


# --- CLI command handlers ---
def cmd_tui(args, config: CodeConfig) -> int:
    if not args.log_file:
        # Keep log output off the curses screen.
        logger.handlers[:] = [logging.NullHandler()]
    from otp_tabs import tui

    app = build_app(config, args.secret or [], args.name or [])
    tui.run(app)
    return 0


def cmd_code(args, config: CodeConfig) -> int:
    now = current_timestamp()
    status = 0
    for secret in args.secrets:
        try:
            code, remaining = derive(secret, config.digits, config.period_seconds, now)
        except OTPTabsError as e:
            print(f"[!] {e}", file=sys.stderr)
            status = 1
            continue
        print(f"TOTP ({config.digits}d): {format_code(code)}  (valid ~{remaining:2d}s)")
    return status


def cmd_watch(args, config: CodeConfig) -> int:
    app = build_app(config, args.secrets, args.name or [])
    print(f"Press Ctrl+C to quit. Generating {config.digits}-digit TOTP every {config.period_seconds}s...\n")
    last_codes = {}
    try:
        while True:
            app.pump()
            changed = False
            for session in app.store:
                if session.last_error:
                    line = f"[{session.display_name}] [!] {session.last_error}"
                else:
                    line = (
                        f"[{session.display_name}] TOTP: {format_code(session.current_code)}"
                        f"  (valid ~{session.remaining_seconds:2d}s)"
                    )
                key = (session.current_code, session.last_error)
                if last_codes.get(session.handle) != key:
                    print(line, flush=True)
                    last_codes[session.handle] = key
                    changed = True
            if not changed:
                # Update remaining seconds inline
                remaining = app.store.active.remaining_seconds
                print(f".. {remaining:2d}s left", end="\r", flush=True)
            time.sleep(args.interval)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_decode(args, config: CodeConfig) -> int:
    decoded = decode_secret_verbose(args.secret)
    print(f"strategy : {decoded.strategy}")
    print(f"length   : {len(decoded.key)} bytes{' (zero-padded)' if decoded.zero_padded else ''}")
    print(f"key (hex): {decoded.key.hex()}")
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otp-tabs", description="Tabbed TOTP code generator")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--digits", type=int, help="Number of code digits (env OTP_TABS_DIGITS, default 6)")
    p.add_argument("--period", type=int, help="TOTP time step in seconds (env OTP_TABS_PERIOD, default 30)")
    p.add_argument("--verbose", action="store_true", help="Verbose output")
    sub = p.add_subparsers(dest="cmd")

    # tui
    pt = sub.add_parser("tui", help="Interactive tabs (default)")
    pt.add_argument("--secret", action="append", help="Open a tab with this secret (repeatable)")
    pt.add_argument("--name", action="append", help="Name for the tab opened by the matching --secret")
    pt.add_argument("--log-file", help="Write log output to this file")
    pt.set_defaults(func=cmd_tui)

    # code
    pc = sub.add_parser("code", help="Print the current code for each secret")
    pc.add_argument("secrets", nargs="+", metavar="SECRET")
    pc.set_defaults(func=cmd_code)

    # watch
    pw = sub.add_parser("watch", help="Show codes in real time")
    pw.add_argument("secrets", nargs="+", metavar="SECRET")
    pw.add_argument("--name", action="append", help="Name for the matching secret (repeatable)")
    pw.add_argument("--interval", type=float, default=1.0, help=argparse.SUPPRESS)
    pw.set_defaults(func=cmd_watch)

    # decode
    pd = sub.add_parser("decode", help="Show how a secret is decoded")
    pd.add_argument("secret", metavar="SECRET")
    pd.set_defaults(func=cmd_decode)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd is None:
        args = parser.parse_args([*argv, "tui"])

    setup_logging(args.verbose, getattr(args, "log_file", None))
    try:
        config = load_config(args.digits, args.period)
    except ConfigError as e:
        parser.error(str(e))
    logger.debug("Config: digits=%d, period=%ds", config.digits, config.period_seconds)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
