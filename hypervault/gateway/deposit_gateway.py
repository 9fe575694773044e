"""Deposit gateway guarding registered vaults against unbalanced deposits.

A deposit is forwarded only when its token1/token0 ratio lies inside a band
around the vault's current holdings ratio. Both ratios are expressed with 18
decimals and clamped to [0.1x, 10x]; the band is ``deposit_delta / delta_scale``
wide on either side. An empty vault has no reference ratio and accepts any
proportion.
"""

from __future__ import annotations

from hypervault.core.adapters.decorators import only_owner
from hypervault.core.chain import Chain, Contract, atomic
from hypervault.core.constants import RATIO_SCALE
from hypervault.core.constants.base import RATIO_CEILING, RATIO_FLOOR
from hypervault.core.errors import ImproperRatioError, ValidationError
from hypervault.core.interfaces import TokenInterface
from hypervault.core.models import GatewaySettings
from hypervault.core.utils.uniswap_v3_math import mul_div
from hypervault.vaults.hypervisor.vault import Hypervisor

# variants below this pull funds through the gateway before depositing
DIRECT_PULL_VARIANT = 3


def clamped_ratio(amount0: int, amount1: int) -> int:
    if amount0 == 0:
        return RATIO_CEILING
    ratio = amount1 * RATIO_SCALE // amount0
    return min(max(ratio, RATIO_FLOOR), RATIO_CEILING)


class DepositGateway(Contract):
    storage = ("positions", "free_deposit", "deposit_delta", "delta_scale")

    def __init__(
        self,
        chain: Chain,
        owner: str,
        *,
        settings: GatewaySettings | None = None,
        label: str = "gateway",
    ):
        super().__init__(chain, label)
        settings = settings or GatewaySettings()
        self.owner = owner
        self.positions: dict[str, int] = {}
        self.free_deposit = settings.free_deposit
        self.deposit_delta = settings.deposit_delta
        self.delta_scale = settings.delta_scale

    # ── registration ────────────────────────────────────────────────────

    @atomic
    @only_owner
    def register_vault(self, caller: str, vault: str, variant: int) -> None:
        if vault in self.positions:
            raise ValidationError(f"vault {vault} is already registered")
        if variant < 1:
            raise ValidationError(f"invalid rule variant {variant}")
        if not isinstance(self.chain.contract_at(vault), Hypervisor):
            raise ValidationError(f"{vault} is not a vault")
        self.positions[vault] = variant
        self.logger.info(f"Registered vault {vault} with variant {variant}")

    def registered_variant(self, vault: str) -> int | None:
        return self.positions.get(vault)

    @atomic
    @only_owner
    def toggle_free_deposit(self, caller: str) -> bool:
        self.free_deposit = not self.free_deposit
        self.logger.info(f"Free deposit {'enabled' if self.free_deposit else 'disabled'}")
        return self.free_deposit

    def is_free_deposit(self) -> bool:
        return self.free_deposit

    @atomic
    @only_owner
    def set_ratio_tolerance(self, caller: str, deposit_delta: int, delta_scale: int) -> None:
        if delta_scale <= 0 or deposit_delta <= delta_scale:
            raise ValidationError("deposit_delta must exceed a positive delta_scale")
        self.deposit_delta = deposit_delta
        self.delta_scale = delta_scale

    # ── ratio guard ─────────────────────────────────────────────────────

    def _vault(self, vault: str) -> Hypervisor:
        if vault not in self.positions:
            raise ValidationError(f"vault {vault} is not registered")
        return self.chain.contract_at(vault)

    def proper_deposit_ratio(self, vault: str, amount0: int, amount1: int) -> bool:
        total0, total1 = self._vault(vault).get_total_amounts()
        if total0 == 0 and total1 == 0:
            return True
        vault_ratio = clamped_ratio(total0, total1)
        deposit_ratio = clamped_ratio(amount0, amount1)
        return (
            deposit_ratio * self.delta_scale // vault_ratio < self.deposit_delta
            and vault_ratio * self.delta_scale // deposit_ratio < self.deposit_delta
        )

    def get_deposit_amount(
        self, vault: str, token: str, amount: int
    ) -> tuple[int, int]:
        """Counter-token band ``(start, end)`` the guard accepts alongside ``amount``."""
        target = self._vault(vault)
        total0, total1 = target.get_total_amounts()
        if target.total_supply == 0 or total0 == 0 or total1 == 0:
            return 0, 0
        if token == target.token0.address:
            start = mul_div(amount * total1, self.delta_scale, total0 * self.deposit_delta)
            end = mul_div(amount * total1, self.deposit_delta, total0 * self.delta_scale)
        elif token == target.token1.address:
            start = mul_div(amount * total0, self.delta_scale, total1 * self.deposit_delta)
            end = mul_div(amount * total0, self.deposit_delta, total1 * self.delta_scale)
        else:
            raise ValidationError(f"token {token} is not held by vault {vault}")
        return start, end

    # ── deposit ─────────────────────────────────────────────────────────

    @atomic
    def deposit(
        self, caller: str, amount0: int, amount1: int, to: str, vault: str
    ) -> int:
        target = self._vault(vault)
        variant = self.positions[vault]
        # the vault pokes before pricing shares; check the ratio on the same totals
        target.poke()
        if not self.free_deposit and not self.proper_deposit_ratio(
            vault, amount0, amount1
        ):
            raise ImproperRatioError()

        if variant < DIRECT_PULL_VARIANT:
            self._stage(target.token0, caller, vault, amount0)
            self._stage(target.token1, caller, vault, amount1)
            shares = target.deposit(self.address, amount0, amount1, to, self.address)
        else:
            shares = target.deposit(self.address, amount0, amount1, to, caller)
        self.logger.info(f"Forwarded {amount0}/{amount1} from {caller} to {vault}")
        return shares

    def _stage(self, token: TokenInterface, depositor: str, vault: str, amount: int) -> None:
        if amount == 0:
            return
        token.transfer_from(self.address, depositor, self.address, amount)
        token.approve(self.address, vault, amount)
