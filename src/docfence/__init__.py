"""docfence - static documentation builds with code fragment validation."""

__version__ = "0.1.0"
