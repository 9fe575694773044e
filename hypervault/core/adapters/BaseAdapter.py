from __future__ import annotations

from abc import ABC

from loguru import logger


class BaseAdapter(ABC):
    """Acts on behalf of a single contract account."""

    def __init__(self, account: str):
        self.account = account
        self.logger = logger.bind(adapter=self.__class__.__name__, account=account)
