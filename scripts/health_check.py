#!/usr/bin/env python3
"""
Health check script for the pool monitor.

Returns exit code 0 if healthy, non-zero otherwise.
Used by Docker health checks to determine container health.

Checks:
1. Snapshot file exists and was written recently
2. Today's dedup window is readable
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from poolwatch.config import Config
from poolwatch.db import SeenPoolStore, SnapshotStore, zoned_today
from poolwatch.exceptions import StoreError


def check_health(config: Config, max_age_sec: float) -> bool:
    """
    Perform health checks.

    Returns:
        True if healthy, False otherwise
    """
    # Check 1: Snapshot freshness
    snapshot = SnapshotStore(config.snapshot_path)
    age = snapshot.age_seconds()
    if age is None:
        print(f"FAIL: No snapshot at {config.snapshot_path}")
        return False
    if age > max_age_sec:
        print(f"FAIL: Snapshot not updated for {age:.0f}s (> {max_age_sec:.0f}s)")
        return False

    # Check 2: Dedup window readable
    try:
        clock = zoned_today(config.reset_timezone, *config.reset_at)
        seen = SeenPoolStore(config.seen_dir, today=clock).get_seen_today()
    except StoreError as e:
        print(f"FAIL: Dedup window unreadable: {e}")
        return False

    try:
        pool_count = len(snapshot.load())
    except StoreError as e:
        print(f"FAIL: Snapshot unreadable: {e}")
        return False

    print(f"OK: snapshot {age:.0f}s old with {pool_count} pools, {len(seen)} pools announced today")
    return True


def main():
    """Run health check and exit with appropriate code."""
    config = Config.from_env()
    parser = argparse.ArgumentParser(description="Pool monitor health check")
    parser.add_argument(
        "--max-age",
        type=float,
        default=config.monitor_interval_sec * 10,
        help="Maximum snapshot age in seconds (default: 10 poll intervals)",
    )
    args = parser.parse_args()

    try:
        healthy = check_health(config, args.max_age)
    except OSError as e:
        print(f"FAIL: Unexpected error: {e}")
        sys.exit(1)
    sys.exit(0 if healthy else 1)


if __name__ == "__main__":
    main()
