"""Exchange rate aggregation with a persistent last-known-rate cache."""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union

from networth.core.exceptions import NotFoundError, ProviderError, RateUnavailableError
from networth.core.money import ONE
from networth.core.timezone import ensure_utc, now_utc
from networth.domain.models import CachedRate, CurrencyPair, CurrencyPairQuote, normalize_currency
from networth.domain.views import RateResult, RateRefreshSummary
from networth.providers.rate_provider import RateProviderAdapter
from networth.repositories.protocols import (
    AccountRepository,
    HoldingRepository,
    RateCacheRepository,
    UserRepository,
)
from networth.services.aggregation_policy import AggregationPolicy

logger = logging.getLogger(__name__)

# Suggested currencies for the popular pairs list
COMMON_CURRENCIES = ["USD", "EUR", "GBP", "JPY", "CAD", "AUD", "SGD", "HKD"]
REVERSE_SUGGESTIONS = ["USD", "EUR", "GBP"]

PairLike = Union[CurrencyPair, tuple[str, str], str]


def _as_pair(value: PairLike) -> CurrencyPair:
    if isinstance(value, CurrencyPair):
        return value
    if isinstance(value, str):
        return CurrencyPair.parse(value)
    return CurrencyPair(value[0], value[1])


class ExchangeRateService:
    """
    Resolves exchange rates from several providers.

    Lookup order: identity, fresh cache entry (either direction), live
    providers queried concurrently, then the last cached value regardless of
    age (flagged as degraded). Only when nothing was ever cached for the pair
    does resolution fail with ``RateUnavailableError``.
    """

    def __init__(
        self,
        rate_cache: RateCacheRepository,
        providers: list[RateProviderAdapter],
        policy: Optional[AggregationPolicy] = None,
        provider_timeout_seconds: float = 5.0,
        max_quote_age_seconds: Optional[int] = None,
        account_repo: Optional[AccountRepository] = None,
        holding_repo: Optional[HoldingRepository] = None,
        user_repo: Optional[UserRepository] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._cache = rate_cache
        self._providers = list(providers)
        self._policy = policy or AggregationPolicy()
        self._timeout = provider_timeout_seconds
        self._max_quote_age = max_quote_age_seconds
        self._account_repo = account_repo
        self._holding_repo = holding_repo
        self._user_repo = user_repo
        self._clock = clock

    # Resolution

    def resolve(self, from_currency: str, to_currency: str, force_refresh: bool = False) -> Decimal:
        """Rate converting one unit of ``from_currency`` into ``to_currency``."""
        return self.resolve_detailed(from_currency, to_currency, force_refresh).rate

    def resolve_detailed(
        self,
        from_currency: str,
        to_currency: str,
        force_refresh: bool = False,
    ) -> RateResult:
        """Like ``resolve`` but also reports freshness, sources and the degraded flag."""
        pair = CurrencyPair(from_currency, to_currency)
        if pair.is_identity:
            return RateResult(pair=pair, rate=ONE, as_of=self._clock())

        cached = self._lookup_cache(pair)
        if not force_refresh and cached and not self._cache.ttl_expired(cached, self._clock()):
            return RateResult(
                pair=pair,
                rate=cached.rate,
                as_of=cached.last_updated,
                from_cache=True,
            )

        quotes = self._fetch_quotes(pair)
        if quotes:
            rate = self._policy.combine(quotes)
            stored = self._cache.put(pair, rate, self._clock())
            return RateResult(
                pair=pair,
                rate=stored.rate,
                as_of=stored.last_updated,
                sources=[q.source for q in quotes],
            )

        if cached:
            logger.warning(
                "All rate providers failed for %s; serving cached rate %s from %s",
                pair, cached.rate, cached.last_updated.isoformat(),
            )
            return RateResult(
                pair=pair,
                rate=cached.rate,
                as_of=cached.last_updated,
                degraded=True,
                from_cache=True,
            )

        logger.error("No exchange rate available for %s", pair)
        raise RateUnavailableError(pair.base, pair.quote)

    def resolve_all(
        self,
        pairs: Iterable[PairLike],
        force_refresh: bool = False,
    ) -> dict[tuple[str, str], RateResult]:
        """
        Resolve many pairs, one resolution per unordered pair.

        Same-currency pairs resolve to 1 without provider calls. Pairs with no
        rate at all are logged and left out of the result.
        """
        requested: list[CurrencyPair] = []
        for value in pairs:
            pair = _as_pair(value)
            if pair not in requested:
                requested.append(pair)

        by_canonical: dict[CurrencyPair, Optional[RateResult]] = {}
        results: dict[tuple[str, str], RateResult] = {}

        for pair in requested:
            if pair.is_identity:
                results[(pair.base, pair.quote)] = RateResult(pair=pair, rate=ONE, as_of=self._clock())
                continue

            key = pair.canonical()
            if key not in by_canonical:
                try:
                    by_canonical[key] = self.resolve_detailed(pair.base, pair.quote, force_refresh)
                except RateUnavailableError:
                    logger.warning("Skipping unavailable pair %s", pair)
                    by_canonical[key] = None

            resolved = by_canonical[key]
            if resolved is None:
                continue
            if resolved.pair == pair:
                results[(pair.base, pair.quote)] = resolved
            else:
                results[(pair.base, pair.quote)] = RateResult(
                    pair=pair,
                    rate=ONE / resolved.rate,
                    as_of=resolved.as_of,
                    degraded=resolved.degraded,
                    from_cache=resolved.from_cache,
                    sources=list(resolved.sources),
                )

        return results

    def convert(self, amount: Decimal, from_currency: str, to_currency: str) -> Decimal:
        """Convert ``amount`` at the current (possibly cached) rate."""
        return amount * self.resolve(from_currency, to_currency)

    # User-level operations

    def refresh_user_rates(self, user_id: str, force_refresh: bool = True) -> RateRefreshSummary:
        """
        Refresh every pair a user needs and store new holding rates.

        Holdings whose pair could not be resolved keep their previous rate.
        """
        if not (self._user_repo and self._account_repo and self._holding_repo):
            raise RuntimeError("refresh_user_rates requires user, account and holding repositories")

        user = self._user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        accounts = self._account_repo.list_accounts(user_id)
        holdings = self._holding_repo.list_holdings(user_id)

        needed: list[CurrencyPair] = [CurrencyPair(a.currency, user.base_currency) for a in accounts]
        needed.extend(h.pair for h in holdings)

        results = self.resolve_all(needed, force_refresh=force_refresh)
        summary = RateRefreshSummary(user_id=user_id)
        now = self._clock()

        for pair in needed:
            if pair.is_identity:
                continue
            label = str(pair)
            result = results.get((pair.base, pair.quote))
            if result is None:
                if label not in summary.unavailable:
                    summary.unavailable.append(label)
                continue
            summary.resolved[label] = result.rate
            if result.degraded and label not in summary.degraded:
                summary.degraded.append(label)
            self._cache.record_pair_hint(user_id, pair, now)

        for holding in holdings:
            result = results.get((holding.pair.base, holding.pair.quote))
            if result is None:
                logger.warning(
                    "Keeping previous rate %s for holding %s (%s)",
                    holding.current_rate, holding.holding_id, holding.pair,
                )
                summary.holdings_kept += 1
                continue
            self._holding_repo.update_current_rate(holding.holding_id, result.rate, now)
            summary.holdings_updated += 1

        logger.info(
            "Refreshed rates for user %s: %d resolved, %d degraded, %d unavailable",
            user_id, len(summary.resolved), len(summary.degraded), len(summary.unavailable),
        )
        return summary

    def popular_pairs(self, user_id: Optional[str], base_currency: str) -> list[CurrencyPair]:
        """The user's most used pairs, then default suggestions against ``base_currency``."""
        base = normalize_currency(base_currency)
        suggestions: list[CurrencyPair] = []

        if user_id:
            suggestions.extend(h.pair for h in self._cache.list_pair_hints(user_id))

        for currency in COMMON_CURRENCIES:
            if currency != base:
                suggestions.append(CurrencyPair(currency, base))
        for currency in REVERSE_SUGGESTIONS:
            if currency != base:
                suggestions.append(CurrencyPair(base, currency))

        unique: list[CurrencyPair] = []
        for pair in suggestions:
            if pair not in unique:
                unique.append(pair)
        return unique

    def last_update_time(self) -> Optional[datetime]:
        """Most recent cache write across all pairs."""
        return self._cache.last_update_time()

    # Internals

    def _lookup_cache(self, pair: CurrencyPair) -> Optional[CachedRate]:
        """Freshest cached rate for the pair in either direction, expressed for ``pair``."""
        direct = self._cache.get(pair)
        reverse = self._cache.get(pair.inverse())
        if reverse is not None:
            reverse = reverse.inverse()

        candidates = [c for c in (direct, reverse) if c is not None]
        if not candidates:
            return None
        return max(candidates, key=lambda c: ensure_utc(c.last_updated))

    def _fetch_quotes(self, pair: CurrencyPair) -> list[CurrencyPairQuote]:
        """Query every provider concurrently; collect all usable quotes within the timeout."""
        if not self._providers:
            return []

        executor = ThreadPoolExecutor(max_workers=len(self._providers))
        try:
            futures = {executor.submit(p.quote, pair): p for p in self._providers}
            done, not_done = wait(futures, timeout=self._timeout)
        finally:
            # Do not block on providers that overran the timeout
            executor.shutdown(wait=False, cancel_futures=True)

        for future in not_done:
            logger.warning("Rate provider %s timed out for %s", futures[future].name, pair)

        quotes: list[CurrencyPairQuote] = []
        for future in done:
            provider = futures[future]
            try:
                quote = future.result()
            except ProviderError as e:
                logger.warning("Rate provider failed: %s", e.message)
                continue
            except Exception as e:
                logger.warning("Rate provider %s raised %s for %s", provider.name, e, pair)
                continue

            usable = self._validate_quote(quote, pair, provider.name)
            if usable is not None:
                quotes.append(usable)

        # Deterministic order regardless of completion order
        order = {p.name: i for i, p in enumerate(self._providers)}
        quotes.sort(key=lambda q: order.get(q.source, len(order)))
        return quotes

    def _validate_quote(
        self,
        quote: CurrencyPairQuote,
        pair: CurrencyPair,
        provider_name: str,
    ) -> Optional[CurrencyPairQuote]:
        if quote is None or quote.rate is None or quote.rate <= 0:
            logger.warning("Rate provider %s returned an unusable quote for %s", provider_name, pair)
            return None

        if quote.pair == pair.inverse():
            quote = CurrencyPairQuote(
                pair=pair,
                rate=ONE / quote.rate,
                source=quote.source,
                observed_at=quote.observed_at,
            )
        elif quote.pair != pair:
            logger.warning("Rate provider %s answered %s instead of %s", provider_name, quote.pair, pair)
            return None

        if self._max_quote_age is not None:
            age = (self._clock() - ensure_utc(quote.observed_at)).total_seconds()
            if age > self._max_quote_age:
                logger.warning(
                    "Rejecting stale quote from %s for %s (%ds old)", provider_name, pair, int(age)
                )
                return None

        return quote
