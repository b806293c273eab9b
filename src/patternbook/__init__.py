"""patternbook: content core for the augmented coding patterns catalogue."""

__version__ = "0.3.0"
