from __future__ import annotations

from dataclasses import dataclass, field

from hypervault.core.constants import MAX_UINT256, ZERO_ADDRESS
from hypervault.core.errors import AuthorizationError, ValidationError


@dataclass
class ShareLedger:
    """Vault share balances. ``mint`` and ``burn`` are the only supply changes."""

    total_supply: int = 0
    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)

    def balance_of(self, holder: str) -> int:
        return self.balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    def mint(self, to: str, amount: int) -> None:
        if to == ZERO_ADDRESS:
            raise ValidationError("mint to the zero address")
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def burn(self, holder: str, amount: int) -> None:
        balance = self.balance_of(holder)
        if balance < amount:
            raise ValidationError(f"burn amount {amount} exceeds balance {balance}")
        self.balances[holder] = balance - amount
        self.total_supply -= amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if amount < 0:
            raise ValidationError("negative allowance")
        self.allowances[(owner, spender)] = amount

    def spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise AuthorizationError(
                f"share allowance {allowed} from {owner} to {spender} is below {amount}"
            )
        if allowed != MAX_UINT256:
            self.allowances[(owner, spender)] = allowed - amount

    def transfer(self, src: str, dst: str, amount: int) -> None:
        if dst == ZERO_ADDRESS:
            raise ValidationError("transfer to the zero address")
        balance = self.balance_of(src)
        if balance < amount:
            raise ValidationError(f"transfer amount {amount} exceeds balance {balance}")
        self.balances[src] = balance - amount
        self.balances[dst] = self.balance_of(dst) + amount
