"""
DHT logger: relay line-delimited JSON sensor readings from a serial device
to logging sinks.
"""

__version__ = "0.3.0"
