"""LINE WORKS bot message gateway."""

__version__ = "1.0.0"
