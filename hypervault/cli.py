from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
from loguru import logger

from hypervault.core.config import (
    get_keeper_settings,
    get_log_level,
    get_vault_settings,
    load_config,
)
from hypervault.core.constants import MAX_UINT256
from hypervault.core.errors import VaultError
from hypervault.core.utils.uniswap_v3_math import (
    price_to_sqrt_price_x96,
    sqrt_price_x96_from_tick,
)
from hypervault.core.utils.units import from_erc20_raw, to_erc20_raw
from hypervault.keeper.keeper import VaultKeeper
from hypervault.keeper.planner import plan_rebalance
from hypervault.testing.stack import deploy_vault_stack

_DECIMALS = 18
_LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _configure_logging(log_level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=str(log_level).upper())


def _fmt(amount: int) -> str:
    return str(from_erc20_raw(amount, _DECIMALS))


@click.group(name="hypervault", help="Plan and simulate two-range liquidity vaults.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON config file (defaults to HYPERVAULT_CONFIG_PATH or ./config.json).",
)
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Overrides system.log_level / HYPERVAULT_LOG_LEVEL.",
)
def cli(config_path: Path | None, log_level: str | None) -> None:
    if config_path is not None:
        load_config(config_path, require_exists=True)
    _configure_logging(log_level or get_log_level())


@cli.command(name="plan", help="Print the base/limit ranges for a price and holdings.")
@click.option("--tick", type=int, required=True)
@click.option("--tick-spacing", type=int, default=60, show_default=True)
@click.option("--total0", default="0", show_default=True, help="token0 held, in tokens")
@click.option("--total1", default="0", show_default=True, help="token1 held, in tokens")
@click.option("--base-width", type=int, default=None, help="Base width in ticks")
@click.option("--limit-width", type=int, default=None, help="Limit width in ticks")
def plan_cmd(
    tick: int,
    tick_spacing: int,
    total0: str,
    total1: str,
    base_width: int | None,
    limit_width: int | None,
) -> None:
    settings = get_keeper_settings()
    try:
        plan = plan_rebalance(
            sqrt_price_x96_from_tick(tick),
            tick,
            tick_spacing,
            to_erc20_raw(total0, _DECIMALS),
            to_erc20_raw(total1, _DECIMALS),
            base_width_ticks=base_width or settings.base_width_ticks,
            limit_width_ticks=limit_width or settings.limit_width_ticks,
            swap_hint=settings.swap_hint,
        )
    except (VaultError, ValueError) as exc:
        _echo_json({"ok": False, "error": str(exc)})
        sys.exit(1)
    _echo_json({"ok": True, "result": plan.model_dump()})


@cli.command(name="simulate", help="Run a deposit/rebalance/trade/withdraw scenario.")
@click.option("--holders", type=click.IntRange(1, 50), default=5, show_default=True)
@click.option("--deposit", "deposit_amount", default="10000", show_default=True)
@click.option("--trade", "trade_amount", default="100", show_default=True)
@click.option("--price", type=float, default=1.0, show_default=True)
def simulate_cmd(
    holders: int, deposit_amount: str, trade_amount: str, price: float
) -> None:
    vault_settings = get_vault_settings()
    keeper_settings = get_keeper_settings()
    deposit_raw = to_erc20_raw(deposit_amount, _DECIMALS)
    trade_raw = to_erc20_raw(trade_amount, _DECIMALS)

    stack = deploy_vault_stack(
        sqrt_price_x96=price_to_sqrt_price_x96(price, _DECIMALS, _DECIMALS),
        vault_settings=vault_settings,
    )
    vault = stack.vault
    fee_recipient = stack["bob"]
    trader = stack["carol"]
    keeper = VaultKeeper(vault, stack.owner, fee_recipient, settings=keeper_settings)
    steps: list[dict[str, Any]] = []

    try:
        accounts = [stack.chain.account(f"holder{i}") for i in range(holders)]
        for account in accounts:
            stack.fund(account, deposit_raw, deposit_raw, spender=vault.address)
            shares = vault.deposit(account, deposit_raw, deposit_raw, account)
            steps.append({"step": "deposit", "holder": account, "shares": shares})

        ok, msg = keeper.update()
        steps.append({"step": "keeper", "ok": ok, "message": msg})

        stack.token0.mint(trader, trade_raw)
        stack.token1.mint(trader, trade_raw)
        stack.token0.approve(trader, stack.router.address, MAX_UINT256)
        stack.token1.approve(trader, stack.router.address, MAX_UINT256)
        if trade_raw:
            out1 = stack.router.exact_input_single(
                trader, stack.token0.address, trade_raw
            )
            out0 = stack.router.exact_input_single(
                trader, stack.token1.address, trade_raw
            )
            steps.append({"step": "trade", "out0": _fmt(out0), "out1": _fmt(out1)})

        ok, msg = keeper.update()
        steps.append({"step": "keeper", "ok": ok, "message": msg})
        status = keeper.status()

        results = []
        for account in accounts:
            amount0, amount1 = vault.withdraw(
                account, vault.balance_of(account), account, account
            )
            results.append(
                {
                    "holder": account,
                    "deposited": [_fmt(deposit_raw), _fmt(deposit_raw)],
                    "withdrawn": [_fmt(amount0), _fmt(amount1)],
                }
            )
    except VaultError as exc:
        logger.error(f"Simulation failed: {exc}")
        _echo_json({"ok": False, "error": str(exc), "steps": steps})
        sys.exit(1)

    fees0, fees1 = stack.balances(fee_recipient)
    _echo_json(
        {
            "ok": True,
            "result": {
                "steps": steps,
                "status": status.model_dump(),
                "protocol_fees": [_fmt(fees0), _fmt(fees1)],
                "held_fees": [_fmt(vault.accrued_fee0), _fmt(vault.accrued_fee1)],
                "holders": results,
            },
        }
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
