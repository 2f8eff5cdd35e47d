"""Trend Monitor - keyword mention tracking over RSS/Atom feeds."""

__version__ = "0.1.0"
