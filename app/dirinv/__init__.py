"""dirinv - recursive filesystem inventory engine."""

__version__ = "0.1.0"
