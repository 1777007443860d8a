from .config import DhtLoggerConfig, SinkConfig, load_config
from .sink_set import SinkSet, SinkFailure
from .loop import AcquisitionLoop, LoopState, LoopStats, run

__all__ = ["DhtLoggerConfig",
           "SinkConfig",
           "load_config",
           "SinkSet",
           "SinkFailure",
           "AcquisitionLoop",
           "LoopState",
           "LoopStats",
           "run"]
