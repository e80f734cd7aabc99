"""Calorie Tracker - daily calorie intake and expenditure tracking."""

__version__ = "0.1.0"
