"""Cake day calculator: birthdays in, a stable cake calendar out."""

__version__ = "0.1.0"
