from __future__ import annotations

from typing import Any, NamedTuple, Protocol


class PositionInfo(NamedTuple):
    liquidity: int
    fee_growth_inside0_last_x128: int
    fee_growth_inside1_last_x128: int
    tokens_owed0: int
    tokens_owed1: int


class TokenInterface(Protocol):
    address: str

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, caller: str, spender: str, amount: int) -> bool: ...

    def transfer(self, caller: str, to: str, amount: int) -> bool: ...

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> bool: ...


class PositionInterface(Protocol):
    """Concentrated-liquidity pool surface consumed by the vault."""

    address: str
    token0: TokenInterface
    token1: TokenInterface
    fee: int
    tick_spacing: int

    def current_price(self) -> tuple[int, int]: ...

    def mint(
        self,
        caller: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
        data: Any = None,
    ) -> tuple[int, int]: ...

    def burn(
        self, caller: str, tick_lower: int, tick_upper: int, liquidity: int
    ) -> tuple[int, int]: ...

    def collect(
        self,
        caller: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int,
    ) -> tuple[int, int]: ...

    def swap(
        self,
        caller: str,
        recipient: str,
        zero_for_one: bool,
        amount_in: int,
        sqrt_price_limit_x96: int,
        data: Any = None,
    ) -> tuple[int, int]: ...

    def position_info(
        self, owner: str, tick_lower: int, tick_upper: int
    ) -> PositionInfo: ...


class MintCallbackReceiver(Protocol):
    def uniswap_v3_mint_callback(
        self, sender: str, amount0_owed: int, amount1_owed: int, data: Any
    ) -> None: ...


class SwapCallbackReceiver(Protocol):
    def uniswap_v3_swap_callback(
        self, sender: str, amount0_delta: int, amount1_delta: int, data: Any
    ) -> None: ...
