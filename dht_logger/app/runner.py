# dht_logger/app/runner.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from dht_logger.core.errors import DeviceConnectError
from dht_logger.sinks.registry import SinkRegistry
from dht_logger.transport.base import Transport
from dht_logger.transport.errors import TransportOpenError
from dht_logger.transport.registry import TransportDriverRegistry
from .config import DhtLoggerConfig
from .loop import AcquisitionLoop, LoopStats
from .sink_set import SinkSet


@dataclass(frozen=True)
class AppRun:
    config: DhtLoggerConfig
    transport: Transport
    sinks: SinkSet
    loop: AcquisitionLoop


def create_transport(
    cfg: DhtLoggerConfig,
    *,
    drivers: Optional[TransportDriverRegistry] = None,
) -> Transport:
    if drivers is None:
        drivers = TransportDriverRegistry.default()
    return drivers.build(cfg.driver, port=cfg.port, baudrate=cfg.baud, timeout=cfg.timeout_s)


def create_sinks(
    cfg: DhtLoggerConfig,
    *,
    registry: Optional[SinkRegistry] = None,
    logger: Optional[logging.Logger] = None,
) -> SinkSet:
    registry = registry or SinkRegistry.default()
    sinks = SinkSet(logger=logger)
    try:
        for sc in cfg.sinks:
            sinks.add(registry.create(sc.type, sc.params))
    except Exception:
        sinks.close()
        raise
    return sinks


def start_run(
    cfg: DhtLoggerConfig,
    *,
    drivers: Optional[TransportDriverRegistry] = None,
    registry: Optional[SinkRegistry] = None,
    logger: Optional[logging.Logger] = None,
) -> AppRun:
    """Build transport, sinks and loop from config. Nothing is opened yet."""
    log = logger or logging.getLogger(__name__)

    transport = create_transport(cfg, drivers=drivers)
    sinks = create_sinks(cfg, registry=registry, logger=log)
    loop = AcquisitionLoop(transport, sinks, logger=log)
    return AppRun(config=cfg, transport=transport, sinks=sinks, loop=loop)


def open_transport(transport: Transport, *, logger: Optional[logging.Logger] = None) -> None:
    log = logger or logging.getLogger(__name__)
    try:
        transport.open()
    except TransportOpenError as e:
        raise DeviceConnectError(
            str(e),
            hint="Check the port name, cable and permissions (e.g. dialout group).",
            details={"source": transport.name},
        ) from None
    log.info("Listening for data on port: %s", transport.name)


def execute(run: AppRun, iterations: Optional[int] = None) -> LoopStats:
    """
    Open the transport, run the loop, and always close transport + sinks.

    iterations overrides the configured value when not None.
    """
    log = logging.getLogger(__name__)
    budget = iterations if iterations is not None else run.config.iterations
    try:
        open_transport(run.transport, logger=log)
        return run.loop.run(budget)
    finally:
        try:
            run.transport.close()
        except Exception:
            log.exception("TRANSPORT_CLOSE_ERROR")
        run.sinks.close()
