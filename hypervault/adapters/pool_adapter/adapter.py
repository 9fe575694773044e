from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Literal

from hypervault.adapters.token_adapter.adapter import TokenAdapter
from hypervault.core.adapters.BaseAdapter import BaseAdapter
from hypervault.core.constants import MAX_SQRT_RATIO, MIN_SQRT_RATIO
from hypervault.core.errors import ReentrancyError
from hypervault.core.interfaces import PositionInfo, PositionInterface

CallbackKind = Literal["mint", "swap"]


@dataclass(frozen=True)
class PendingCall:
    kind: CallbackKind
    request_id: int
    pool: str


class PoolAdapter(BaseAdapter):
    """The vault's only route to its pool.

    Every mint and swap opens a ``PendingCall`` that travels to the pool as the
    callback ``data``. A callback is serviced only if it echoes the open request
    and arrives from the registered pool; anything else raises
    ``ReentrancyError`` before a single token moves.
    """

    def __init__(
        self,
        pool: PositionInterface,
        *,
        owner: str,
        tokens: TokenAdapter,
    ):
        super().__init__(owner)
        self.pool = pool
        self.owner = owner
        self.tokens = tokens
        self._pending: PendingCall | None = None
        self._request_seq = 0

    @property
    def pending(self) -> PendingCall | None:
        return self._pending

    @contextmanager
    def _expect_callback(self, kind: CallbackKind) -> Iterator[PendingCall]:
        if self._pending is not None:
            raise ReentrancyError(
                f"{kind} requested while {self._pending.kind} "
                f"#{self._pending.request_id} is pending"
            )
        self._request_seq += 1
        call = PendingCall(kind, self._request_seq, self.pool.address)
        self._pending = call
        try:
            yield call
        finally:
            self._pending = None

    def _accept(self, sender: str, kind: CallbackKind, data: Any) -> PendingCall:
        pending = self._pending
        if pending is None:
            reason = f"unsolicited {kind} callback from {sender}"
        elif sender != pending.pool:
            reason = f"{kind} callback from unexpected sender {sender}"
        elif pending.kind != kind or data != pending:
            reason = f"{kind} callback does not match pending request"
        else:
            return pending
        self.logger.warning(f"Rejected callback: {reason}")
        raise ReentrancyError(reason)

    # ── reads ───────────────────────────────────────────────────────────

    def current_price(self) -> tuple[int, int]:
        return self.pool.current_price()

    def position_info(self, tick_lower: int, tick_upper: int) -> PositionInfo:
        return self.pool.position_info(self.owner, tick_lower, tick_upper)

    # ── writes ──────────────────────────────────────────────────────────

    def mint(self, tick_lower: int, tick_upper: int, liquidity: int) -> tuple[int, int]:
        if liquidity == 0:
            return 0, 0
        with self._expect_callback("mint") as call:
            return self.pool.mint(
                self.owner, self.owner, tick_lower, tick_upper, liquidity, call
            )

    def burn(self, tick_lower: int, tick_upper: int, liquidity: int) -> tuple[int, int]:
        return self.pool.burn(self.owner, tick_lower, tick_upper, liquidity)

    def collect(
        self,
        tick_lower: int,
        tick_upper: int,
        recipient: str,
        amount0_max: int,
        amount1_max: int,
    ) -> tuple[int, int]:
        return self.pool.collect(
            self.owner, recipient, tick_lower, tick_upper, amount0_max, amount1_max
        )

    def swap(
        self, zero_for_one: bool, amount_in: int, sqrt_price_limit_x96: int | None = None
    ) -> tuple[int, int]:
        if sqrt_price_limit_x96 is None:
            sqrt_price_limit_x96 = (
                MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1
            )
        with self._expect_callback("swap") as call:
            return self.pool.swap(
                self.owner,
                self.owner,
                zero_for_one,
                amount_in,
                sqrt_price_limit_x96,
                call,
            )

    # ── callbacks ───────────────────────────────────────────────────────

    def on_mint_callback(
        self, sender: str, amount0_owed: int, amount1_owed: int, data: Any
    ) -> None:
        self._accept(sender, "mint", data)
        self.tokens.push(self.tokens.token0, sender, amount0_owed)
        self.tokens.push(self.tokens.token1, sender, amount1_owed)

    def on_swap_callback(
        self, sender: str, amount0_delta: int, amount1_delta: int, data: Any
    ) -> None:
        self._accept(sender, "swap", data)
        if amount0_delta > 0:
            self.tokens.push(self.tokens.token0, sender, amount0_delta)
        if amount1_delta > 0:
            self.tokens.push(self.tokens.token1, sender, amount1_delta)
