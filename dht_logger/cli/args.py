# dht_logger/cli/args.py
from __future__ import annotations

import argparse
from typing import Optional


def positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{value}'") from None
    if n <= 0:
        raise argparse.ArgumentTypeError(f"Must be a positive integer, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dht-logger",
        description="Log DHT sensor readings received over serial to various channels.",
    )
    parser.add_argument(
        "-c", "--config",
        required=True,
        help="Config file containing DHT logging settings (YAML).",
    )
    parser.add_argument(
        "-n", "--iterations",
        type=positive_int,
        default=None,
        help="Stop after this many lines were read (default: config value, else run forever).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level name (DEBUG, INFO, ...). Defaults to $DHT_LOGGER_LOG, else INFO.",
    )
    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
