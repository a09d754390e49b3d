"""Spreadsheet -> relational table migration with column-name reconciliation."""

__version__ = "0.1.0"
