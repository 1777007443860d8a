# dht_logger/cli/main.py
from __future__ import annotations

import logging
from typing import Optional

from dht_logger.app.config import load_config
from dht_logger.app.runner import execute, start_run
from dht_logger.common.logging_config import configure_logging, resolve_log_level
from dht_logger.core.errors import DhtLoggerError

from dht_logger.cli.args import parse_args

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        level = resolve_log_level(args.log_level)
    except ValueError as e:
        print(f"ERROR: {e}")
        return EXIT_ERROR
    configure_logging(level)
    log = logging.getLogger("dht_logger")

    try:
        cfg = load_config(args.config)
        run = start_run(cfg, logger=log)
        execute(run, iterations=args.iterations)
        return EXIT_OK
    except DhtLoggerError as e:
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        log.info("Stopped by user.")
        return EXIT_INTERRUPTED
