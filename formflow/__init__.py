"""Multi-step form schema model and conditional evaluation engine."""

__version__ = "1.0.0"
