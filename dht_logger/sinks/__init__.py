from .logging_sink import LoggingSink
from .console import ConsoleSink
from .jsonl_file import JsonLinesFileSink
from .csv_file import CsvFileSink
from .udp import UdpSink
from .registry import SinkRegistry

__all__ = ["LoggingSink",
           "ConsoleSink",
           "JsonLinesFileSink",
           "CsvFileSink",
           "UdpSink",
           "SinkRegistry"]
