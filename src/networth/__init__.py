"""Multi-currency net worth tracking and daily performance snapshots."""

__version__ = "0.1.0"
