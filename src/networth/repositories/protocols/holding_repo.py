"""Currency holding ledger repository protocol."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol, Optional

from networth.domain.models import CurrencyHolding


class HoldingRepository(Protocol):
    """Interface for per-user currency pair positions."""

    def create(self, holding: CurrencyHolding) -> CurrencyHolding:
        """Persist a new holding."""
        ...

    def get_by_id(self, holding_id: str) -> Optional[CurrencyHolding]:
        """Retrieve holding by ID."""
        ...

    def list_holdings(self, user_id: str) -> list[CurrencyHolding]:
        """List all holdings owned by a user."""
        ...

    def update(self, holding: CurrencyHolding) -> CurrencyHolding:
        """Update amount, average cost and rate of an existing holding."""
        ...

    def update_current_rate(
        self,
        holding_id: str,
        rate: Decimal,
        updated_at: datetime,
    ) -> None:
        """Store a refreshed market rate for a holding."""
        ...
