#!/usr/bin/env python3
"""Command-line field log.

Every invocation is a fresh process: the session and the road signs are
restored from the data directory (``ROADSIGNS_DATA_DIR`` or ``--data-dir``)
exactly as the interactive app would restore them after a reload.

Examples::

    field_log.py login user@example.com password123
    field_log.py capture --category no_parking --lat 45.4642 --lng 9.19
    field_log.py list
    field_log.py export --out signs.geojson
    field_log.py logout
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyroadsigns import (  # noqa: E402
    CATALOG,
    InMemoryMapSurface,
    NoticeLevel,
    Position,
    RoadSignsApp,
    RoadSignsConfig,
    RoadSignsError,
    StaticGeolocationProvider,
)
from pyroadsigns.map.markers import format_capture_time  # noqa: E402
from pyroadsigns.models.catalog import category_name  # noqa: E402


def _print_notice(level: NoticeLevel, message: str) -> None:
    # Failures are reported once, from the exception in main().
    if level != NoticeLevel.ERROR:
        print(message)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Road sign field log")
    parser.add_argument("--data-dir", default=None, help="Data directory (default: ROADSIGNS_DATA_DIR or ~/.pyroadsigns)")
    parser.add_argument("--verbose", "-v", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Create an account")
    register.add_argument("identity")
    register.add_argument("secret")

    login = sub.add_parser("login", help="Log in")
    login.add_argument("identity")
    login.add_argument("secret")

    sub.add_parser("logout", help="Log out and delete every captured sign")
    sub.add_parser("status", help="Show the session state")
    sub.add_parser("list", help="List captured signs")
    sub.add_parser("categories", help="List sign categories")

    capture = sub.add_parser("capture", help="Capture a sign at the current position")
    capture.add_argument("--category", default=CATALOG[0].id, help="Sign category id")
    capture.add_argument("--lat", type=float, default=None, help="Latitude of a fixed position")
    capture.add_argument("--lng", type=float, default=None, help="Longitude of a fixed position")

    remove = sub.add_parser("remove", help="Remove a captured sign")
    remove.add_argument("id")

    export = sub.add_parser("export", help="Write the marker layer as GeoJSON")
    export.add_argument("--out", default=None, help="Output file (default: stdout)")

    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    overrides = {"data_dir": args.data_dir} if args.data_dir else {}
    config = RoadSignsConfig.from_env(**overrides)

    provider = None
    if args.command == "capture" and args.lat is not None and args.lng is not None:
        provider = StaticGeolocationProvider(Position(latitude=args.lat, longitude=args.lng))

    async with RoadSignsApp(config, provider=provider, on_notice=_print_notice) as app:
        if args.command == "register":
            app.register(args.identity, args.secret)
        elif args.command == "login":
            app.login(args.identity, args.secret)
        elif args.command == "logout":
            app.logout()
        elif args.command == "status":
            session = app.session
            print(f"Logged in as {session.identity}" if session.is_active else "Logged out")
            print(f"{len(app.signs)} road sign(s)")
        elif args.command == "categories":
            for category in CATALOG:
                print(f"{category.id:<16} {category.color:<8} {category.name}")
        elif args.command == "list":
            tz = config.zoneinfo()
            for sign in app.signs:
                print(
                    f"{sign.id}  {category_name(sign.category):<22} "
                    f"{sign.latitude:.4f}, {sign.longitude:.4f}  "
                    f"{format_capture_time(sign, tz)}"
                )
        elif args.command == "capture":
            await app.capture(args.category)
        elif args.command == "remove":
            if app.remove_sign(args.id) is None:
                print(f"No road sign with id {args.id}", file=sys.stderr)
                return 1
        elif args.command == "export":
            surface = app.open_surface()
            if not isinstance(surface, InMemoryMapSurface):
                print("Export needs the in-memory map surface", file=sys.stderr)
                return 2
            text = json.dumps(surface.to_geojson(), indent=2)
            if args.out:
                Path(args.out).write_text(text + "\n", encoding="utf-8")
            else:
                print(text)
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except RoadSignsError as exc:
        logging.getLogger("field_log").debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
