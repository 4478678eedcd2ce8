"""vpm - Vim plugin manager build engine."""

__version__ = "0.1.0"
