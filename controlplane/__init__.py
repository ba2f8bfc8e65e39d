"""Control-plane API for the monitoring platform."""

__version__ = "0.1.0"
