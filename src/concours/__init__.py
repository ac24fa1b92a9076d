"""Competitive-admission ranking and status workflow."""

__version__ = "0.1.0"
