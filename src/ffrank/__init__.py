"""Weekly fantasy football position-rank snapshots."""

__version__ = "0.1.0"
