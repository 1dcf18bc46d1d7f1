"""VideoHub engagement aggregation and feed assembly service."""

__version__ = "1.0.0"
