"""Forever Paws photo crop toolkit."""

__version__ = "0.4.0"
