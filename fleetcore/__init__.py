"""Building blocks for a fleet management server: models, limits, scheduling and subscriptions."""

__version__ = "0.1.0"