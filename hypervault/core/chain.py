"""In-process ledger that hosts the vault, its pool and its tokens.

Every participant is a :class:`Contract` registered on a :class:`Chain`.
State-changing entry points run inside ``Chain.transaction()``; the outermost
transaction snapshots the storage of every contract and restores it if an
exception escapes, so a failed call leaves no partial effect behind.
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, ClassVar

from eth_utils import keccak, to_checksum_address
from loguru import logger

from hypervault.core.errors import ValidationError


class Contract:
    """Base class for stateful participants living on a :class:`Chain`."""

    storage: ClassVar[tuple[str, ...]] = ()

    def __init__(self, chain: Chain, label: str | None = None):
        self.chain = chain
        self.label = label or self.__class__.__name__
        self.address = chain.new_address(self.label)
        self.logger = logger.bind(contract=self.label)
        chain.register(self)

    def _dump_storage(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self.storage}

    def _load_storage(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.label}@{self.address})"


class Chain:
    def __init__(self):
        self.contracts: dict[str, Contract] = {}
        self._nonce = 0
        self._depth = 0

    def new_address(self, label: str) -> str:
        self._nonce += 1
        digest = keccak(text=f"{label}:{self._nonce}")
        return to_checksum_address(digest[-20:])

    def account(self, label: str) -> str:
        """Address for an externally-owned account (no code, no storage)."""
        return self.new_address(label)

    def register(self, contract: Contract) -> None:
        if contract.address in self.contracts:
            raise ValidationError(f"address already in use: {contract.address}")
        self.contracts[contract.address] = contract

    def contract_at(self, address: str) -> Contract:
        try:
            return self.contracts[address]
        except KeyError:
            raise ValidationError(f"no contract at {address}") from None

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return {addr: c._dump_storage() for addr, c in self.contracts.items()}

    def revert(self, snap: dict[str, dict[str, Any]]) -> None:
        for addr, state in snap.items():
            self.contracts[addr]._load_storage(state)

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snap = self.snapshot()
        self._depth = 1
        try:
            yield
        except Exception as exc:
            self.revert(snap)
            logger.debug(f"Transaction reverted: {type(exc).__name__}: {exc}")
            raise
        finally:
            self._depth = 0


def atomic(fn: Callable) -> Callable:
    """Run a contract method inside ``self.chain.transaction()``."""

    @functools.wraps(fn)
    def wrapper(self: Contract, *args: Any, **kwargs: Any) -> Any:
        with self.chain.transaction():
            return fn(self, *args, **kwargs)

    return wrapper
