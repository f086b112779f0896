"""
VaultGate CLI

Command-line helpers for preparing and inspecting gateway calls.

Usage:
    vaultgate encode approve <token> <amount> [--exchange ADDRESS]
    vaultgate encode deposit <token> <amount> [--exchange ADDRESS]
    vaultgate encode withdraw <token> <amount> [--exchange ADDRESS]
    vaultgate encode transfer <token> <amount> <destination>
    vaultgate decode-revert <hex>
    vaultgate show-config
"""

import json
from typing import Optional

import click
from eth_utils import decode_hex

from .config import GatewayConfig, load_config
from .crypto.abi import decode_revert_reason
from .exceptions import VaultGateException
from .gateway.instructions import Instruction, InstructionBuilder

from . import __version__


def _print_instruction(instruction: Instruction) -> None:
    click.echo(json.dumps(instruction.to_dict(), indent=2))


def _builder(config: GatewayConfig, exchange: Optional[str]) -> InstructionBuilder:
    address = exchange or config.gateway.exchange
    if not address:
        raise click.UsageError("No exchange address: pass --exchange or set [gateway] exchange")
    try:
        return InstructionBuilder(address)
    except VaultGateException as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="vaultgate")
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to vaultgate.toml (default: $VAULTGATE_CONFIG or ./vaultgate.toml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str]):
    """VaultGate custody gateway tools."""
    try:
        config = load_config(config_path)
        config.logging.validate()
    except VaultGateException as e:
        raise click.ClickException(str(e))
    config.logging.apply()
    ctx.obj = config


# ── encode ────────────────────────────────────────────────────────────

@cli.group("encode")
def encode_group():
    """Print the instruction the gateway would forward for an action."""


exchange_option = click.option(
    "--exchange", "-e",
    default=None,
    help="Exchange address (default: [gateway] exchange)",
)


@encode_group.command("approve")
@click.argument("token")
@click.argument("amount", type=int)
@exchange_option
@click.pass_obj
def encode_approve(config: GatewayConfig, token: str, amount: int, exchange: Optional[str]):
    """approve(exchange, AMOUNT) on TOKEN."""
    builder = _builder(config, exchange)
    try:
        _print_instruction(builder.approve(token, amount))
    except VaultGateException as e:
        raise click.ClickException(str(e))


@encode_group.command("deposit")
@click.argument("token")
@click.argument("amount", type=int)
@exchange_option
@click.pass_obj
def encode_deposit(config: GatewayConfig, token: str, amount: int, exchange: Optional[str]):
    """deposit(TOKEN, AMOUNT) on the exchange."""
    builder = _builder(config, exchange)
    try:
        _print_instruction(builder.deposit(token, amount))
    except VaultGateException as e:
        raise click.ClickException(str(e))


@encode_group.command("withdraw")
@click.argument("token")
@click.argument("amount", type=int)
@exchange_option
@click.pass_obj
def encode_withdraw(config: GatewayConfig, token: str, amount: int, exchange: Optional[str]):
    """withdraw(TOKEN, AMOUNT) on the exchange."""
    builder = _builder(config, exchange)
    try:
        _print_instruction(builder.withdraw(token, amount))
    except VaultGateException as e:
        raise click.ClickException(str(e))


@encode_group.command("transfer")
@click.argument("token")
@click.argument("amount", type=int)
@click.argument("destination")
@exchange_option
@click.pass_obj
def encode_transfer(
    config: GatewayConfig,
    token: str,
    amount: int,
    destination: str,
    exchange: Optional[str],
):
    """transfer(DESTINATION, AMOUNT) on TOKEN."""
    builder = _builder(config, exchange)
    try:
        _print_instruction(builder.transfer(token, amount, destination))
    except VaultGateException as e:
        raise click.ClickException(str(e))


# ── decode-revert ─────────────────────────────────────────────────────

@cli.command("decode-revert")
@click.argument("data")
def decode_revert_cmd(data: str):
    """Decode a revert payload (Error(string) or Panic(uint256))."""
    try:
        raw = decode_hex(data)
    except ValueError:
        raise click.ClickException(f"Not a hex string: {data}")

    reason = decode_revert_reason(raw)
    if reason is None:
        click.echo(f"Unrecognised revert data ({len(raw)} bytes): 0x{raw.hex()}")
    else:
        click.echo(reason)


# ── show-config ───────────────────────────────────────────────────────

@cli.command("show-config")
@click.pass_obj
def show_config_cmd(config: GatewayConfig):
    """Print the resolved configuration."""
    click.echo(json.dumps(config.to_dict(), indent=2))


def main():
    cli()


if __name__ == "__main__":
    main()
