"""Read-through cache for hotel room pricing rates."""

__version__ = "1.0.0"
