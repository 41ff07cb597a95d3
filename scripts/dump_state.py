#!/usr/bin/env python3
"""Dump the server state pymist can see.

This script runs one aggregate sync and prints every facet of the
resulting snapshot, both the parsed model fields **and** the raw API
JSON, so you can spot fields that aren't parsed yet.

Usage
-----
Point it at a server and run::

    export MIST_BASE_URL="http://localhost:4242"
    python scripts/dump_state.py

Options::

    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --protocols          Also fetch the configured protocol listeners
    --watch N            Poll N times at the configured interval
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from collections.abc import Mapping
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pymist import MistClient, MistConfig, MistRequestError, Snapshot  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _print_entities(title: str, entities: Mapping[str, Any], out: list[str]) -> dict[str, Any]:
    """Print each model of a facet and return its JSON-ready form."""
    out.append(_section(f"{title} ({len(entities)})"))
    dumped: dict[str, Any] = {}
    for key, model in entities.items():
        fields = model.model_dump(exclude={"raw"})
        out.append(f"  [{key}]")
        for name, value in fields.items():
            out.append(f"    {name}: {value!r}")
        extra = sorted(set(model.raw) - set(fields))
        if extra:
            out.append(f"    (unparsed: {', '.join(extra)})")
        dumped[key] = {"parsed": fields, "raw": model.model_dump(include={"raw"})["raw"]}
    return dumped


def _dump_snapshot(snapshot: Snapshot, out: list[str]) -> dict[str, Any]:
    out.append(_section("SNAPSHOT"))
    out.append(f"  fetched_at : {snapshot.fetched_at}")
    out.append(f"  active     : {', '.join(sorted(snapshot.active_stream_names)) or '-'}")
    stats = snapshot.aggregate_stats()
    out.append(
        f"  totals     : {stats.total_streams} streams, {stats.total_clients} clients, "
        f"{stats.formatted_bandwidth}, avg uptime {stats.formatted_average_uptime}"
    )
    return {
        "fetched_at": snapshot.fetched_at,
        "active_stream_names": sorted(snapshot.active_stream_names),
        "streams": _print_entities("STREAMS", snapshot.configured_streams, out),
        "stream_stats": _print_entities("STREAM STATS", snapshot.stream_stats, out),
        "pushes": _print_entities("PUSHES", snapshot.pushes, out),
        "clients": _print_entities("CLIENTS", snapshot.clients, out),
    }


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump the server state pymist can fetch for debugging / development.",
    )
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--protocols", action="store_true", help="Also fetch protocol listeners")
    parser.add_argument("--watch", type=int, default=1, metavar="N", help="Number of refresh cycles")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = MistConfig.from_env()
    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "api_url": config.api_url,
        "cycles": [],
    }

    out: list[str] = []
    out.append(_section("pymist dump_state"))
    out.append(f"  time      : {result['timestamp']}")
    out.append(f"  api       : {config.api_url}")

    async with MistClient(config) as client:
        for cycle in range(max(1, args.watch)):
            if cycle:
                await asyncio.sleep(config.poll_interval)
            try:
                snapshot = await client.refresh()
            except MistRequestError as exc:
                out.append(f"\n  refresh failed: {exc}")
                result["cycles"].append({"error": str(exc)})
                continue
            result["cycles"].append(_dump_snapshot(snapshot, out))
            out.append(client.status_line(running=True))

        if args.protocols:
            try:
                protocols = await client.get_protocols()
            except MistRequestError as exc:
                out.append(f"\n  protocols failed: {exc}")
            else:
                result["protocols"] = _print_entities("PROTOCOLS", protocols, out)

    # ── Output ──
    if args.json_mode:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
        return

    print("\n".join(out))
    if args.output:
        Path(args.output).write_text(
            json.dumps(result, indent=2, default=str, ensure_ascii=False),
            encoding="utf-8",
        )
        print(f"JSON written to {args.output}")


if __name__ == "__main__":
    asyncio.run(main())
