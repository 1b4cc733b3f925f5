"""Finn: spending-history analysis for budget planning."""

__version__ = "0.3.0"
