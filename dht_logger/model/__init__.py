from .reading import Measurement, SensorError, SensorResult, Reading
from .codec import decode_line, encode_line

__all__ = ["Measurement",
           "SensorError",
           "SensorResult",
           "Reading",
           "decode_line",
           "encode_line"]
