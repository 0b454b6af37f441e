#!/usr/bin/env python3
"""
Command-line interface for the athlete snapshot.

Usage:
    python -m gridiron_data.cli build                      # Build and persist a fresh snapshot
    python -m gridiron_data.cli build --output snap.json   # ... to a specific file
    python -m gridiron_data.cli status                     # Show the persisted snapshot
    python -m gridiron_data.cli load                       # Load, rebuilding only if stale
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from typing import Optional

logger = logging.getLogger("gridiron.cli")


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_cache(output: Optional[str] = None):
    """Snapshot cache at `output`, or at the configured location."""
    from .services.snapshot_cache import SnapshotCache

    return SnapshotCache(path=output)


async def cmd_build_async(args: argparse.Namespace) -> int:
    """Build a snapshot from ESPN and persist it."""
    from .services.snapshot_builder import build_athlete_snapshot

    cache = get_cache(args.output)

    logger.info("Building athlete snapshot...")
    start = time.perf_counter()
    try:
        snapshot = await build_athlete_snapshot()
        path = cache.save(snapshot)
    except Exception as e:
        logger.error("Failed to build snapshot: %s", e)
        return 1
    duration_ms = (time.perf_counter() - start) * 1000

    print(
        f"Snapshot saved to {path} with {len(snapshot.players)} players "
        f"for season {snapshot.season} (generated {snapshot.generated_at}) "
        f"in {duration_ms:.0f}ms."
    )
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    """Sync wrapper for build."""
    return asyncio.run(cmd_build_async(args))


def cmd_status(args: argparse.Namespace) -> int:
    """Show the persisted snapshot and whether it would be reused."""
    from .services.snapshot_cache import StaleSnapshotError

    cache = get_cache(args.output)
    if not cache.path.exists():
        logger.info("No snapshot at %s", cache.path)
        return 1

    try:
        snapshot = cache.read()
        stale_reason = None
    except StaleSnapshotError as e:
        snapshot = None
        stale_reason = str(e)

    print("\nAthlete Snapshot Status")
    print("=" * 50)
    print(f"Location: {cache.path}")
    if snapshot is None:
        print(f"Stale: yes ({stale_reason})")
        return 0

    positions: dict[str, int] = {}
    for player in snapshot.players:
        code = player.position.abbreviation if player.position else "?"
        positions[code] = positions.get(code, 0) + 1

    print(f"Schema Version: {snapshot.schema_version}")
    print(f"Season: {snapshot.season}")
    print(f"Generated: {snapshot.generated_at}")
    print(f"Players: {len(snapshot.players):,}")
    print("Stale: no")
    print()
    print("Players by position:")
    for code, count in sorted(positions.items()):
        print(f"  {code}: {count:,}")
    return 0


async def cmd_load_async(args: argparse.Namespace) -> int:
    """Load through the cache, rebuilding when stale."""
    cache = get_cache(args.output)
    try:
        snapshot = await cache.load()
    except Exception as e:
        logger.error("Failed to load snapshot: %s", e)
        return 1

    print(
        f"Snapshot at {cache.path}: {len(snapshot.players)} players "
        f"for season {snapshot.season} (generated {snapshot.generated_at})."
    )
    return 0


def cmd_load(args: argparse.Namespace) -> int:
    """Sync wrapper for load."""
    return asyncio.run(cmd_load_async(args))


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Athlete snapshot CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    build_parser = subparsers.add_parser("build", help="Build and persist a fresh snapshot")
    build_parser.add_argument("--output", help="Snapshot file (default: configured snapshot path)")

    status_parser = subparsers.add_parser("status", help="Show the persisted snapshot")
    status_parser.add_argument("--output", help="Snapshot file (default: configured snapshot path)")

    load_parser = subparsers.add_parser("load", help="Load the snapshot, rebuilding if stale")
    load_parser.add_argument("--output", help="Snapshot file (default: configured snapshot path)")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        "build": cmd_build,
        "status": cmd_status,
        "load": cmd_load,
    }

    cmd_func = commands.get(args.command)
    if cmd_func:
        return cmd_func(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
