#!/usr/bin/env python3
"""
Producer/Consumer Demo
======================

Runs N producers and K consumers against one BoundedQueue and prints what
happened.

Uses:
- L1 BoundedQueue + QueueConfig (optionally loaded from YAML/JSON).
- L2 run_pipeline: spawns workers, closes the queue when producers finish.

Examples:
    python apps/cli.py --producers 4 --consumers 2 --items 1000 --capacity 8
    python apps/cli.py --config demo.yaml -v
"""

import argparse
import logging
import sys
from collections import Counter

from monitor_queue.l0_core import InvalidArgument
from monitor_queue.l1_queue.config import QueueConfig, load_queue_config
from monitor_queue.l2_workers.workers import run_pipeline


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(stream=sys.stdout,
                        level=logging.DEBUG if verbose else logging.INFO,
                        format="%(asctime)s:%(levelname)s:%(name)s:%(message)s",
                        datefmt="%Y-%m-%d %H:%M:%S")


def build_config(args: argparse.Namespace) -> QueueConfig:
    """Config file first, then any explicit command-line overrides."""
    base = load_queue_config(args.config) if args.config else QueueConfig()
    return QueueConfig(
        capacity=args.capacity if args.capacity is not None else base.capacity,
        name=base.name,
        producers=args.producers if args.producers is not None else base.producers,
        consumers=args.consumers if args.consumers is not None else base.consumers,
        items_per_producer=args.items if args.items is not None else base.items_per_producer,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Bounded queue producer/consumer demo")
    parser.add_argument("--config", help="YAML or JSON file with queue settings")
    parser.add_argument("--capacity", type=int, help="Queue capacity")
    parser.add_argument("--producers", type=int, help="Number of producer threads")
    parser.add_argument("--consumers", type=int, help="Number of consumer threads")
    parser.add_argument("--items", type=int, help="Items per producer")
    parser.add_argument("--timeout", type=float, default=30.0, help="Seconds before giving up")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    try:
        cfg = build_config(args)
    except (FileNotFoundError, InvalidArgument) as e:
        print(f"[ERROR] bad configuration: {e}", file=sys.stderr)
        return 2

    try:
        report = run_pipeline(cfg, timeout=args.timeout)
    except TimeoutError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    per_producer = Counter(pid for pid, _ in report.consumed)
    duplicates = len(report.consumed) - len(set(report.consumed))
    print(f"produced:   {report.produced}")
    print(f"consumed:   {len(report.consumed)} (duplicates: {duplicates})")
    print(f"high-water: {report.max_observed_size}/{cfg.capacity}")
    print(f"duration:   {report.duration_s:.3f}s")
    for pid in sorted(per_producer):
        print(f"  producer-{pid}: {per_producer[pid]}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
