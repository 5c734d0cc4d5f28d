"""Round-robin match completion tracker for pair-based leagues."""

__version__ = "1.0.0"
