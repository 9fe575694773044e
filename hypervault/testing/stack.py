"""Simulated deployment of a pool, a vault and a gateway."""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger

from hypervault.core.chain import Chain
from hypervault.core.models import GatewaySettings, VaultSettings
from hypervault.core.utils.uniswap_v3_math import encode_price_sqrt
from hypervault.gateway.deposit_gateway import DepositGateway
from hypervault.testing.erc20 import TestERC20
from hypervault.testing.pool import MockPool
from hypervault.testing.router import SwapRouter
from hypervault.vaults.hypervisor.vault import Hypervisor

ONE = 10**18
DEFAULT_DEPOSIT_MAX = 100_000 * ONE
DEFAULT_ACCOUNTS = (
    "alice",
    "bob",
    "carol",
    "other",
    "user0",
    "user1",
    "user2",
    "user3",
    "user4",
)


@dataclass
class VaultStack:
    chain: Chain
    owner: str
    token0: TestERC20
    token1: TestERC20
    pool: MockPool
    router: SwapRouter
    vault: Hypervisor
    gateway: DepositGateway
    accounts: dict[str, str] = field(default_factory=dict)

    def __getitem__(self, name: str) -> str:
        return self.accounts[name]

    def fund(
        self, account: str, amount0: int, amount1: int, *, spender: str | None = None
    ) -> None:
        """Mint both tokens to ``account`` and optionally approve ``spender``."""
        self.token0.mint(account, amount0)
        self.token1.mint(account, amount1)
        if spender is not None:
            self.token0.approve(account, spender, amount0)
            self.token1.approve(account, spender, amount1)

    def balances(self, account: str) -> tuple[int, int]:
        return self.token0.balance_of(account), self.token1.balance_of(account)


def deploy_vault_stack(
    *,
    fee: int = 3000,
    sqrt_price_x96: int | None = None,
    vault_settings: VaultSettings | None = None,
    gateway_settings: GatewaySettings | None = None,
    accounts: tuple[str, ...] = DEFAULT_ACCOUNTS,
) -> VaultStack:
    chain = Chain()
    owner = chain.account("owner")
    token0 = TestERC20(chain, "TKA")
    token1 = TestERC20(chain, "TKB")
    pool = MockPool(chain, token0, token1, fee=fee)
    pool.initialize(sqrt_price_x96 or encode_price_sqrt(1, 1))
    router = SwapRouter(chain, pool)
    vault = Hypervisor(
        chain,
        pool,
        owner,
        settings=vault_settings
        or VaultSettings(
            deposit0_max=DEFAULT_DEPOSIT_MAX, deposit1_max=DEFAULT_DEPOSIT_MAX
        ),
    )
    gateway = DepositGateway(chain, owner, settings=gateway_settings)
    stack = VaultStack(
        chain=chain,
        owner=owner,
        token0=token0,
        token1=token1,
        pool=pool,
        router=router,
        vault=vault,
        gateway=gateway,
        accounts={name: chain.account(name) for name in accounts},
    )
    logger.debug(f"Deployed vault stack: pool={pool.address} vault={vault.address}")
    return stack
