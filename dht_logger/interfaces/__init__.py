from .reading_sink import ReadingSink

__all__ = ["ReadingSink"]
