"""User domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """Owner of accounts and holdings; all aggregates use ``base_currency``."""

    user_id: str
    name: str
    base_currency: str
    created_at: Optional[datetime] = field(default=None)
