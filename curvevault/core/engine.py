"""
Pool trading state machine.

`PoolStateMachine` owns the buy/sell protocol for a pool record:

1. Validate the request (amount, active flag, counterparty).
2. Quote the gross amount from the curve integral and split the fee.
3. Run every remaining checked step (new supply, new reserve).
4. Call the ledger (two transfers).
5. Commit supply/reserve and emit a trade record.

Steps 1-3 are pure; nothing touches the ledger until all arithmetic has
succeeded, and the pool is only mutated in step 5. Any raised error therefore
leaves the record untouched.

States are `{Active, Inactive}` over `pool.is_active`; trading is only allowed
while active and only `set_active` (creator-gated) moves between them.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..state.pools import Pool
from .curves import CurveKind, price, resolve_curve
from .errors import (
    InactivePoolError,
    InsufficientReserveError,
    InsufficientSupplyError,
    InvalidCounterpartyError,
    UnauthorizedError,
    ValidationError,
)
from .fees import FEE_BASIS_POINTS, FeeSplit, gross_up, split_fee
from .integral import EXP_DIRECT_SUM_THRESHOLD, integral_cost
from .math import checked_add, checked_sub
from .types import (
    BuyResult,
    EventSink,
    Ledger,
    PoolCreated,
    SellQuote,
    SellResult,
    StatusChanged,
    TradeKind,
    TradeRecord,
)

logger = logging.getLogger(__name__)


def _require_positive_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError("amount must be an int")
    if amount <= 0:
        raise ValidationError(f"amount must be greater than zero: {amount}")


def _require_non_negative_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise ValidationError("amount must be an int")
    if amount < 0:
        raise ValidationError(f"amount must be non-negative: {amount}")


class PoolStateMachine:
    def __init__(
        self,
        ledger: Ledger,
        events: EventSink,
        *,
        fee_bps: int = FEE_BASIS_POINTS,
        direct_sum_threshold: int = EXP_DIRECT_SUM_THRESHOLD,
    ) -> None:
        # Validates the rate up front.
        split_fee(0, fee_bps)
        if not isinstance(direct_sum_threshold, int) or direct_sum_threshold < 0:
            raise ValidationError(f"direct_sum_threshold must be a non-negative int: {direct_sum_threshold}")
        self._ledger = ledger
        self._events = events
        self.fee_bps = fee_bps
        self.direct_sum_threshold = direct_sum_threshold

    # -- Lifecycle -----------------------------------------------------------

    def initialize(
        self,
        kind: CurveKind,
        identifier: str,
        parent_identifier: str,
        creator_wallet: str,
        authority: str,
        base_price: Optional[int] = None,
        curve_param: Optional[int] = None,
        *,
        display_name: str = "",
        metadata_uri: str = "",
        created_at: int = 0,
    ) -> Pool:
        """
        Build a new Active pool, resolving default curve parameters.

        The caller owns persistence; this only constructs the record and emits
        `PoolCreated`.
        """
        curve, bp = resolve_curve(kind, base_price, curve_param)
        pool = Pool(
            curve=curve,
            identifier=identifier,
            parent_identifier=parent_identifier or "",
            creator_wallet=creator_wallet,
            authority=authority,
            base_price=bp,
            display_name=display_name,
            metadata_uri=metadata_uri,
            created_at=created_at,
        )
        self._events.emit(
            PoolCreated(
                pool_key=pool.key,
                namespace=pool.namespace,
                identifier=pool.identifier,
                parent_identifier=pool.parent_identifier,
                creator_wallet=pool.creator_wallet,
                authority=pool.authority,
                base_price=pool.base_price,
                curve_param=pool.curve_param,
            )
        )
        logger.info("pool created: %s/%s base_price=%d param=%d",
                    pool.namespace, pool.identifier, pool.base_price, pool.curve_param)
        return pool

    def set_active(self, pool: Pool, caller: str, active: bool) -> None:
        """Toggle trading. Only the pool's creator wallet may call this."""
        if caller != pool.creator_wallet:
            raise UnauthorizedError(f"{caller!r} is not the creator of pool {pool.identifier!r}")
        pool.is_active = bool(active)
        self._events.emit(StatusChanged(pool_key=pool.key, is_active=pool.is_active, changed_by=caller))
        logger.info("pool %s status -> %s", pool.identifier, pool.status.value)

    # -- Quotes --------------------------------------------------------------

    def _cost(self, pool: Pool, start: int, end: int) -> int:
        return integral_cost(
            pool.curve,
            pool.base_price,
            start,
            end,
            direct_sum_threshold=self.direct_sum_threshold,
        )

    def quote_price(self, pool: Pool) -> int:
        return price(pool.curve, pool.base_price, pool.total_supply)

    def quote_buy_cost(self, pool: Pool, amount: int) -> int:
        """Estimated total a buyer pays for `amount` tokens, fee included."""
        _require_non_negative_amount(amount)
        end = checked_add(pool.total_supply, amount)
        cost = self._cost(pool, pool.total_supply, end)
        total = gross_up(cost, self.fee_bps)
        logger.debug("quote buy %s amount=%d cost=%d total=%d", pool.identifier, amount, cost, total)
        return total

    def quote_sell_refund(self, pool: Pool, amount: int) -> SellQuote:
        _require_non_negative_amount(amount)
        if amount > pool.total_supply:
            raise InsufficientSupplyError(f"sell amount {amount} exceeds supply {pool.total_supply}")
        gross = self._cost(pool, pool.total_supply - amount, pool.total_supply)
        split = split_fee(gross, self.fee_bps)
        return SellQuote(gross=gross, fee=split.fee, net=split.net)

    # -- Trading -------------------------------------------------------------

    def _check_counterparty(self, pool: Pool, fee_recipient: Optional[str]) -> None:
        if fee_recipient is not None and fee_recipient != pool.creator_wallet:
            raise InvalidCounterpartyError(
                f"fee recipient {fee_recipient!r} does not match creator wallet of {pool.identifier!r}"
            )

    def buy(
        self,
        pool: Pool,
        trader: str,
        amount: int,
        *,
        fee_recipient: Optional[str] = None,
    ) -> BuyResult:
        _require_positive_amount(amount)
        if not pool.is_active:
            raise InactivePoolError(f"pool {pool.identifier!r} is inactive")
        self._check_counterparty(pool, fee_recipient)

        start_supply = pool.total_supply
        end_supply = checked_add(start_supply, amount)
        gross_cost = self._cost(pool, start_supply, end_supply)
        split: FeeSplit = split_fee(gross_cost, self.fee_bps)
        new_reserve = checked_add(pool.reserve, split.net)

        pool_key = pool.key
        self._ledger.transfer(trader, pool_key, split.net)
        self._ledger.transfer(trader, pool.creator_wallet, split.fee)

        pool.reserve = new_reserve
        pool.total_supply = end_supply

        self._events.emit(
            TradeRecord(
                pool_key=pool_key,
                kind=TradeKind.BUY,
                trader=trader,
                amount=amount,
                gross=gross_cost,
                fee=split.fee,
                new_supply=end_supply,
                new_reserve=new_reserve,
            )
        )
        logger.info("buy %s amount=%d gross=%d fee=%d supply=%d reserve=%d",
                    pool.identifier, amount, gross_cost, split.fee, end_supply, new_reserve)
        return BuyResult(
            gross_cost=gross_cost,
            fee=split.fee,
            pool_deposit=split.net,
            new_supply=end_supply,
            new_reserve=new_reserve,
        )

    def sell(
        self,
        pool: Pool,
        trader: str,
        amount: int,
        *,
        fee_recipient: Optional[str] = None,
    ) -> SellResult:
        _require_positive_amount(amount)
        if amount > pool.total_supply:
            raise InsufficientSupplyError(f"sell amount {amount} exceeds supply {pool.total_supply}")
        if not pool.is_active:
            raise InactivePoolError(f"pool {pool.identifier!r} is inactive")
        self._check_counterparty(pool, fee_recipient)

        end_supply = pool.total_supply
        start_supply = checked_sub(end_supply, amount)
        gross_refund = self._cost(pool, start_supply, end_supply)
        split = split_fee(gross_refund, self.fee_bps)
        payout = checked_add(split.net, split.fee)
        # Refund and fee both come out of the pool-held reserve.
        if pool.reserve < payout:
            raise InsufficientReserveError(
                f"reserve {pool.reserve} cannot cover refund {split.net} + fee {split.fee}"
            )
        new_reserve = pool.reserve - payout

        pool_key = pool.key
        self._ledger.debit_credit(pool_key, trader, split.net)
        self._ledger.debit_credit(pool_key, pool.creator_wallet, split.fee)

        pool.reserve = new_reserve
        pool.total_supply = start_supply

        self._events.emit(
            TradeRecord(
                pool_key=pool_key,
                kind=TradeKind.SELL,
                trader=trader,
                amount=amount,
                gross=gross_refund,
                fee=split.fee,
                new_supply=start_supply,
                new_reserve=new_reserve,
            )
        )
        logger.info("sell %s amount=%d gross=%d fee=%d supply=%d reserve=%d",
                    pool.identifier, amount, gross_refund, split.fee, start_supply, new_reserve)
        return SellResult(
            gross_refund=gross_refund,
            fee=split.fee,
            net_refund=split.net,
            new_supply=start_supply,
            new_reserve=new_reserve,
        )
