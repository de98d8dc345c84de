"""Enumerations for domain models."""

from enum import Enum


class AccountType(str, Enum):
    """Kinds of accounts a user can track."""

    INVESTMENT = "INVESTMENT"
    BANK = "BANK"  # Cash; carries no invested capital
    MANUAL = "MANUAL"  # Manually-entered positions
    BROKER = "BROKER"  # Broker-synced portfolio
