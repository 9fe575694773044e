import pytest

from hypervault.core.constants.base import RATIO_CEILING, RATIO_FLOOR
from hypervault.core.errors import (
    AuthorizationError,
    ImproperRatioError,
    ValidationError,
)
from hypervault.gateway.deposit_gateway import clamped_ratio
from hypervault.testing.stack import ONE


@pytest.fixture
def gated(stack):
    """Vault registered with the direct-pull variant and whitelisted to the gateway."""
    stack.gateway.register_vault(stack.owner, stack.vault.address, 3)
    stack.vault.set_whitelist(stack.owner, stack.gateway.address)
    return stack


def _gateway_deposit(stack, name, amount0, amount1, *, spender=None):
    account = stack[name]
    stack.fund(account, amount0, amount1, spender=spender or stack.vault.address)
    return stack.gateway.deposit(account, amount0, amount1, account, stack.vault.address)


def test_clamped_ratio():
    assert clamped_ratio(ONE, ONE) == ONE
    assert clamped_ratio(ONE, 2 * ONE) == 2 * ONE
    assert clamped_ratio(0, ONE) == RATIO_CEILING
    assert clamped_ratio(ONE, 0) == RATIO_FLOOR
    assert clamped_ratio(ONE, 100 * ONE) == RATIO_CEILING


class TestRegistration:
    def test_register_records_variant(self, stack):
        stack.gateway.register_vault(stack.owner, stack.vault.address, 1)
        assert stack.gateway.registered_variant(stack.vault.address) == 1
        assert stack.gateway.registered_variant(stack.pool.address) is None

    def test_duplicate_registration_fails(self, gated):
        with pytest.raises(ValidationError, match="already registered"):
            gated.gateway.register_vault(gated.owner, gated.vault.address, 1)
        assert gated.gateway.registered_variant(gated.vault.address) == 3

    def test_register_validation(self, stack):
        with pytest.raises(ValidationError):
            stack.gateway.register_vault(stack.owner, stack.vault.address, 0)
        with pytest.raises(ValidationError):
            stack.gateway.register_vault(stack.owner, stack.pool.address, 1)
        with pytest.raises(ValidationError):
            stack.gateway.register_vault(stack.owner, stack["alice"], 1)
        with pytest.raises(AuthorizationError):
            stack.gateway.register_vault(stack["alice"], stack.vault.address, 1)
        assert stack.gateway.positions == {}

    def test_unregistered_vault_is_rejected(self, stack):
        alice = stack["alice"]
        with pytest.raises(ValidationError, match="not registered"):
            stack.gateway.deposit(alice, ONE, ONE, alice, stack.vault.address)
        with pytest.raises(ValidationError):
            stack.gateway.proper_deposit_ratio(stack.vault.address, ONE, ONE)


class TestRatioGuard:
    def test_empty_vault_accepts_any_ratio(self, gated):
        assert gated.gateway.proper_deposit_ratio(gated.vault.address, ONE, 0)
        shares = _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)
        assert shares == 20_000 * ONE
        assert gated.vault.balance_of(gated["alice"]) == shares

    @pytest.mark.parametrize(
        "amounts", [(20_000 * ONE, 0), (0, 20_000 * ONE), (1000 * ONE, 1020 * ONE)]
    )
    def test_improper_ratio_is_rejected(self, gated, amounts):
        _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)
        supply = gated.vault.total_supply

        with pytest.raises(ImproperRatioError, match="Improper ratio"):
            _gateway_deposit(gated, "bob", *amounts)

        assert gated.vault.total_supply == supply
        assert gated.balances(gated["bob"]) == amounts

    def test_single_sided_vault_rejects_the_other_side(self, gated):
        assert _gateway_deposit(gated, "alice", 20_000 * ONE, 0) == 20_000 * ONE
        with pytest.raises(ImproperRatioError):
            _gateway_deposit(gated, "bob", 0, 20_000 * ONE)
        assert gated.vault.get_total_amounts() == (20_000 * ONE, 0)

    def test_close_ratio_is_accepted(self, gated):
        _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)
        assert _gateway_deposit(gated, "bob", 1000 * ONE, 998 * ONE) > 0
        assert gated.balances(gated["bob"]) == (0, 0)

    def test_free_deposit_skips_the_guard(self, gated):
        _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)

        assert gated.gateway.toggle_free_deposit(gated.owner) is True
        assert gated.gateway.is_free_deposit()
        assert _gateway_deposit(gated, "bob", 20_000 * ONE, 0) == 20_000 * ONE

        assert gated.gateway.toggle_free_deposit(gated.owner) is False
        with pytest.raises(AuthorizationError):
            gated.gateway.toggle_free_deposit(gated["bob"])

    def test_ratio_tolerance(self, gated):
        _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)
        vault = gated.vault.address
        assert not gated.gateway.proper_deposit_ratio(vault, 1000 * ONE, 1050 * ONE)

        gated.gateway.set_ratio_tolerance(gated.owner, 1100, 1000)
        assert gated.gateway.proper_deposit_ratio(vault, 1000 * ONE, 1050 * ONE)

        with pytest.raises(ValidationError):
            gated.gateway.set_ratio_tolerance(gated.owner, 1000, 1000)
        assert (gated.gateway.deposit_delta, gated.gateway.delta_scale) == (1100, 1000)


@pytest.fixture
def moved(gated):
    """Gated vault holding base and limit positions after carol pushed the price up."""
    _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)
    gated.vault.rebalance(gated.owner, -1800, 1800, 0, 600, gated["other"])
    carol = gated["carol"]
    gated.fund(carol, 10**30, 10**30, spender=gated.router.address)
    gated.router.exact_input_single(carol, gated.token1.address, 1000 * ONE)
    return gated


class TestRatioGuardOnPositions:
    def test_deposit_at_vault_ratio_is_accepted(self, moved):
        moved.vault.poke()
        total0, total1 = moved.vault.get_total_amounts()
        assert total1 * 100 > total0 * 115

        shares = _gateway_deposit(moved, "bob", total0 // 20, total1 // 20)

        supply = moved.vault.total_supply
        assert abs(shares - (supply - shares) // 20) < 10**6
        assert moved.balances(moved["bob"]) == (0, 0)

    @pytest.mark.parametrize(
        "amounts", [(1000 * ONE, 1000 * ONE), (2000 * ONE, 0), (0, 2000 * ONE)]
    )
    def test_deposit_off_vault_ratio_is_rejected(self, moved, amounts):
        supply = moved.vault.total_supply
        with pytest.raises(ImproperRatioError):
            _gateway_deposit(moved, "bob", *amounts)
        assert moved.vault.total_supply == supply
        assert moved.balances(moved["bob"]) == amounts

    def test_guard_sees_fees_pending_in_the_pool(self, moved):
        gateway, vault = moved.gateway, moved.vault
        gateway.set_ratio_tolerance(moved.owner, 10_001, 10_000)
        stale0, stale1 = vault.get_total_amounts()
        amount0, amount1 = stale0 // 20, stale1 // 20
        assert gateway.proper_deposit_ratio(vault.address, amount0, amount1)

        with pytest.raises(ImproperRatioError):
            _gateway_deposit(moved, "bob", amount0, amount1)

        vault.poke()
        total0, total1 = vault.get_total_amounts()
        assert total1 > stale1
        assert _gateway_deposit(moved, "bob", total0 // 20, total1 // 20) > 0


class TestVariants:
    def test_direct_pull_needs_vault_whitelist(self, stack):
        stack.gateway.register_vault(stack.owner, stack.vault.address, 3)
        with pytest.raises(AuthorizationError):
            _gateway_deposit(stack, "alice", ONE, ONE)
        assert stack.vault.total_supply == 0

    def test_staged_variant_pulls_through_gateway(self, stack):
        gateway = stack.gateway
        gateway.register_vault(stack.owner, stack.vault.address, 1)

        shares = _gateway_deposit(stack, "alice", 500 * ONE, 500 * ONE, spender=gateway.address)

        assert shares == 1000 * ONE
        assert stack.vault.balance_of(stack["alice"]) == shares
        assert stack.balances(gateway.address) == (0, 0)
        assert stack.vault.get_total_amounts() == (500 * ONE, 500 * ONE)

    def test_staged_variant_skips_zero_amounts(self, stack):
        stack.gateway.register_vault(stack.owner, stack.vault.address, 2)
        shares = _gateway_deposit(stack, "alice", 0, 300 * ONE, spender=stack.gateway.address)
        assert shares == 300 * ONE


class TestDepositAmount:
    def test_empty_vault_has_no_band(self, gated):
        assert gated.gateway.get_deposit_amount(
            gated.vault.address, gated.token0.address, ONE
        ) == (0, 0)

    def test_band_around_vault_ratio(self, gated):
        _gateway_deposit(gated, "alice", 10_000 * ONE, 10_000 * ONE)
        vault = gated.vault.address

        start, end = gated.gateway.get_deposit_amount(vault, gated.token0.address, 1000 * ONE)
        assert start == 1000 * ONE * 1000 // 1010
        assert end == 1010 * ONE
        assert gated.gateway.get_deposit_amount(vault, gated.token1.address, 1000 * ONE) == (
            start,
            end,
        )

    def test_band_for_foreign_token(self, gated):
        _gateway_deposit(gated, "alice", ONE, ONE)
        with pytest.raises(ValidationError):
            gated.gateway.get_deposit_amount(gated.vault.address, gated["carol"], ONE)
