#!/usr/bin/env python3
"""Watch the liveplaya view and print every session state transition.

Runs a :class:`~liveplaya.SessionController` against the configured
backend (or the offline mock) and prints one line per state change.

Usage
-----
::

    export LIVEPLAYA_BASE_URL="http://localhost:8080"
    python scripts/watch_view.py --zoom 13 --duration 30

Options::

    --zoom Z            Initial zoom level
    --center LNG,LAT    Initial map centre
    --interval SECONDS  Refresh period (default: from config, 5s)
    --duration SECONDS  Stop after this long (default: run until Ctrl-C)
    --mock              Use the offline mock transport
    --json              Print each state as JSON
    --verbose, -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import aiohttp

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from liveplaya import (  # noqa: E402
    HttpTransport,
    LiveplayaConfig,
    MockTransport,
    Query,
    SessionController,
    SessionState,
)


def _parse_center(value: str) -> tuple[float, float]:
    parts = value.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError("expected LNG,LAT")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid coordinates: {value}") from exc


def _format_state(state: SessionState) -> str:
    parts = ["loading" if state.is_loading else "idle"]
    if state.view is not None:
        view = state.view
        parts.append(f"view={view.name!r} features={len(view.features)} refs={len(view.refs)} log={len(view.log)}")
    if state.alert is not None:
        parts.append(f"alert[{state.alert.level}]={state.alert.text!r}")
    return "  ".join(parts)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Print liveplaya session state transitions.")
    parser.add_argument("--zoom", type=float, help="Initial zoom level")
    parser.add_argument("--center", type=_parse_center, help="Initial map centre as LNG,LAT")
    parser.add_argument("--interval", type=float, help="Refresh period in seconds")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    parser.add_argument("--mock", action="store_true", help="Use the offline mock transport")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Print each state as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides = {} if args.interval is None else {"refresh_interval": args.interval}
    config = LiveplayaConfig.from_env(**overrides)
    query = Query.around(args.center, zoom=args.zoom) if args.center else Query(zoom=args.zoom)

    async with aiohttp.ClientSession() as http_session:
        transport = MockTransport() if args.mock else HttpTransport(config, http_session)
        async with SessionController(transport, query, config.refresh_interval) as controller:

            def _print_state() -> None:
                state = controller.state
                if args.json_mode:
                    print(state.model_dump_json(exclude={"view": {"raw"}}))
                else:
                    print(_format_state(state))

            controller.subscribe(_print_state)
            if args.duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(args.duration)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
