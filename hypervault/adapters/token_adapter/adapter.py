from hypervault.core.adapters.BaseAdapter import BaseAdapter
from hypervault.core.errors import AuthorizationError, ValidationError
from hypervault.core.interfaces import TokenInterface


class TokenAdapter(BaseAdapter):
    """Moves the vault's two tokens in and out of ``holder``.

    ``pull`` only succeeds against an allowance the owner granted beforehand;
    ``push`` sends from the holder's own balance.
    """

    def __init__(
        self,
        token0: TokenInterface,
        token1: TokenInterface,
        *,
        holder: str,
    ):
        super().__init__(holder)
        self.token0 = token0
        self.token1 = token1
        self.holder = holder

    def _check(self, token: TokenInterface) -> None:
        if token is not self.token0 and token is not self.token1:
            raise ValidationError(f"unknown token {getattr(token, 'address', token)}")

    def pull(self, token: TokenInterface, owner: str, amount: int) -> None:
        self._check(token)
        if amount == 0:
            return
        allowed = token.allowance(owner, self.holder)
        if allowed < amount:
            raise AuthorizationError(
                f"allowance {allowed} from {owner} is below {amount}"
            )
        token.transfer_from(self.holder, owner, self.holder, amount)
        self.logger.debug(f"Pulled {amount} of {token.address} from {owner}")

    def push(self, token: TokenInterface, to: str, amount: int) -> None:
        self._check(token)
        if amount == 0:
            return
        token.transfer(self.holder, to, amount)
        self.logger.debug(f"Pushed {amount} of {token.address} to {to}")

    def approve(self, token: TokenInterface, spender: str, amount: int) -> None:
        self._check(token)
        token.approve(self.holder, spender, amount)

    def balances(self) -> tuple[int, int]:
        return (
            self.token0.balance_of(self.holder),
            self.token1.balance_of(self.holder),
        )
