"""
frame-client CLI

Command-line access to a locally running Frame wallet.

Commands:
  info      - Show endpoint, active chain and exposed accounts
  chain     - Print the wallet's current chain id
  accounts  - List the accounts the wallet exposes
  switch    - Switch the wallet to another chain (adds it if needed)
  send      - Forward a transaction to the wallet for signing
  call      - Run a read-only contract call
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click
from loguru import logger

from . import __version__
from .chains import StaticChainRegistry, WELL_KNOWN_CHAINS
from .client import FrameClient
from .config import FrameConfig
from .errors import ConfigError, FrameClientError

T = TypeVar("T")

VERSION = __version__


# ============ Helpers ============


def _load_config(ctx: click.Context) -> FrameConfig:
    overrides = {k: v for k, v in ctx.obj["overrides"].items() if v is not None}
    try:
        return dataclasses.replace(FrameConfig.from_env(), **overrides)
    except ConfigError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(2)


def _run(ctx: click.Context, action: Callable[[FrameClient], Awaitable[T]], **connect: Any) -> T:
    """Connect, run one action, always close; map errors to exit codes."""
    config = _load_config(ctx)

    async def _main() -> T:
        client = await FrameClient.connect(config=config, **connect)
        try:
            return await action(client)
        finally:
            await client.close()

    try:
        return asyncio.run(_main())
    except FrameClientError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(exc.exit_code)


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="frame-client")
@click.option("--endpoint", default=None, help="Wallet RPC endpoint (default: http://127.0.0.1:1248)")
@click.option("--timeout", type=float, default=None, help="Per-call timeout in seconds")
@click.option("--origin", default=None, help="Origin reported to the wallet")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic to stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    endpoint: Optional[str],
    timeout: Optional[float],
    origin: Optional[str],
    verbose: bool,
) -> None:
    """frame-client: talk to a local Frame wallet."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"endpoint": endpoint, "timeout": timeout, "origin": origin}
    if verbose:
        logger.enable("frame_client")
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ============ Session ============


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show endpoint, active chain and exposed accounts."""
    config = _load_config(ctx)

    async def _info(client: FrameClient) -> None:
        click.secho("  Frame ──────────────────────────────────", fg="cyan")
        click.echo(click.style("  Endpoint:  ", dim=True) + config.endpoint)
        click.echo(click.style("  Chain:     ", dim=True) + click.style(str(client.active_chain_id), fg="bright_white"))
        if client.accounts:
            for account in client.accounts:
                click.echo(click.style("  Account:   ", dim=True) + account)
        else:
            click.echo(click.style("  Account:   ", dim=True) + click.style("none exposed", fg="yellow"))

    _run(ctx, _info)


@cli.command()
@click.pass_context
def chain(ctx: click.Context) -> None:
    """Print the wallet's current chain id."""

    async def _chain(client: FrameClient) -> None:
        click.echo(await client.get_chain_id())

    _run(ctx, _chain)


@cli.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List the accounts the wallet exposes."""

    async def _accounts(client: FrameClient) -> None:
        found = await client.get_accounts()
        if not found:
            click.echo("No accounts exposed.")
        for account in found:
            click.echo(account)

    _run(ctx, _accounts)


# ============ Switch ============


@cli.command()
@click.argument("chain_id", type=int)
@click.option(
    "--chains",
    "chains_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON file of chain descriptors for chains the wallet may not know",
)
@click.pass_context
def switch(ctx: click.Context, chain_id: int, chains_file: Optional[Path]) -> None:
    """Switch the wallet to CHAIN_ID."""
    registry = StaticChainRegistry(WELL_KNOWN_CHAINS)
    if chains_file is not None:
        try:
            for descriptor in StaticChainRegistry.from_path(chains_file):
                registry.register(descriptor)
        except ValueError as exc:
            click.secho(f"ERROR: Invalid chains file: {exc}", fg="red")
            sys.exit(2)

    async def _switch(client: FrameClient) -> None:
        ack = await client.switch_network(chain_id)
        if not ack.changed:
            click.echo(f"Already on chain {chain_id}.")
        elif ack.added_chain:
            click.secho(f"Added and switched to chain {chain_id}.", fg="green")
        else:
            click.secho(f"Switched to chain {chain_id}.", fg="green")

    _run(ctx, _switch, registry=registry)


# ============ Transactions ============


@cli.command()
@click.option("--to", "to", default=None, help="Recipient address")
@click.option("--create", is_flag=True, help="Contract creation (no recipient, DATA is init code)")
@click.option("--from", "from_address", default=None, help="Sender address (default: wallet's choice)")
@click.option("--value", default=None, type=int, help="Value in wei")
@click.option("--data", default=None, help="0x-prefixed calldata")
@click.option("--gas", default=None, type=int, help="Gas limit")
@click.pass_context
def send(
    ctx: click.Context,
    to: Optional[str],
    create: bool,
    from_address: Optional[str],
    value: Optional[int],
    data: Optional[str],
    gas: Optional[int],
) -> None:
    """Forward a transaction to the wallet for signing and broadcast."""
    tx = {
        "to": to,
        "from_address": from_address,
        "value": value,
        "data": data,
        "gas": gas,
        "contract_creation": create,
    }
    tx = {k: v for k, v in tx.items() if v is not None}

    async def _send(client: FrameClient) -> None:
        tx_hash = await client.send_transaction(tx)
        click.secho("SUCCESS: Wallet accepted the transaction", fg="green")
        click.echo(f"  TX: {tx_hash}")

    _run(ctx, _send)


@cli.command()
@click.argument("address")
@click.argument("calldata")
@click.option("--block", default="latest", help="Block tag or number")
@click.pass_context
def call(ctx: click.Context, address: str, calldata: str, block: str) -> None:
    """Run a read-only call of CALLDATA against ADDRESS."""
    block_ref: Any = int(block) if block.isdigit() else block

    async def _call(client: FrameClient) -> None:
        result = await client.call_contract(address, calldata, block_ref)
        click.echo("0x" + result.hex())

    _run(ctx, _call)


# ============ Entry Points ============


def main() -> None:
    """frame-client CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
