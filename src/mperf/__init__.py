"""mperf: synthetic write-load generator for object stores."""

__version__ = "0.1.0"
