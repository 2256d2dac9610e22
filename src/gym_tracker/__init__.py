"""gym-tracker: strength-training log with progress analytics."""

__version__ = "0.1.0"
