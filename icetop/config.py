"""
Command line configuration
==========================
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass

DEFAULT_SCHEDULER_URL = "http://localhost:8766"


@dataclass
class Config:
    simulate: bool = False
    seed: int = 0
    cycles: int = 0
    interval: float = 0.02          # seconds between simulator ticks
    scheduler: str = DEFAULT_SCHEDULER_URL
    netname: str = ""
    retry_interval: float = 1.0
    refresh: float = 1.0
    anonymize: bool = False
    log_file: str | None = None
    log_level: str = "WARNING"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="icetop",
        description="Live terminal monitor for an Icecream compile cluster",
    )
    ap.add_argument("--simulate", action="store_true",
                    help="Drive the dashboard from a synthetic cluster")
    ap.add_argument("--seed", type=int, default=0, help="Simulator seed (default 0)")
    ap.add_argument("--cycles", type=int, default=0,
                    help="Stop after this many simulator cycles (default: run forever)")
    ap.add_argument("--interval", type=int, default=20,
                    help="Simulator tick interval in ms (default 20)")
    ap.add_argument("-s", "--scheduler", default=DEFAULT_SCHEDULER_URL,
                    help=f"Scheduler monitor URL (default {DEFAULT_SCHEDULER_URL})")
    ap.add_argument("-n", "--netname", default="", help="Icecream network name")
    ap.add_argument("--retry-interval", type=float, default=1.0,
                    help="Seconds between reconnect attempts (default 1)")
    ap.add_argument("--refresh", type=float, default=1.0,
                    help="Periodic redraw interval in seconds (default 1)")
    ap.add_argument("--anonymize", action="store_true",
                    help="Replace host names and file names with placeholders")
    ap.add_argument("--log-file", default=None, help="Write log messages to this file")
    ap.add_argument("--log-level", default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                    help="Log level (default WARNING)")
    return ap


def parse_config(argv: list[str] | None = None) -> Config:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.cycles < 0:
        ap.error("--cycles must not be negative")
    if args.interval <= 0:
        ap.error("--interval must be positive")
    if args.retry_interval <= 0:
        ap.error("--retry-interval must be positive")
    if args.refresh <= 0:
        ap.error("--refresh must be positive")

    return Config(
        simulate=args.simulate,
        seed=args.seed,
        cycles=args.cycles,
        interval=args.interval / 1000.0,
        scheduler=args.scheduler,
        netname=args.netname,
        retry_interval=args.retry_interval,
        refresh=args.refresh,
        anonymize=args.anonymize,
        log_file=args.log_file,
        log_level=args.log_level,
    )
