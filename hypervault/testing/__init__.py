from .erc20 import TestERC20
from .pool import MockPool
from .router import SwapRouter
from .stack import VaultStack, deploy_vault_stack

__all__ = ["MockPool", "SwapRouter", "TestERC20", "VaultStack", "deploy_vault_stack"]
