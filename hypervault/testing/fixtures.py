"""pytest fixtures for the simulated vault stack.

Registered as a pytest plugin from ``conftest.py``.
"""

from __future__ import annotations

import pytest

from hypervault.core.chain import Chain
from hypervault.testing.stack import VaultStack, deploy_vault_stack


@pytest.fixture
def chain() -> Chain:
    return Chain()


@pytest.fixture
def stack() -> VaultStack:
    return deploy_vault_stack()
