"""
proxybid CLI - Command Line Interface for escrowed proxy-bidding auctions

Main entry point for all CLI commands.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

import click

from proxybid import __version__
from proxybid.utils.logger import get_logger, parse_subsystem_levels, setup_logging

logger = get_logger("cli")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--env-file", default=None, type=click.Path(dir_okay=False), help=".env file to load")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False), help="JSON config file")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug, env_file, config_path):
    """proxybid - escrowed proxy-bidding auctions"""
    from proxybid.core.config import load_config

    cfg = load_config(config_path=config_path, env_file=env_file)
    level = logging.DEBUG if debug else getattr(logging, cfg.log_level.upper(), logging.INFO)
    try:
        subsystem_levels = {} if debug else parse_subsystem_levels(cfg.log_levels)
    except ValueError as e:
        raise click.ClickException(str(e))
    setup_logging(
        level=level,
        log_dir=str(cfg.log_dir),
        log_to_file=cfg.log_to_file,
        subsystem_levels=subsystem_levels,
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


# =============================================================================
# Helpers
# =============================================================================


class World:
    """Named parties plus the asset systems and directory of one CLI run."""

    def __init__(self, asset_mode, token_symbol: str = "PBT"):
        from proxybid.core.assets import NativeBank, TokenLedger
        from proxybid.core.directory import AuctionDirectory

        self.asset_mode = asset_mode
        self.bank = NativeBank()
        self.token = TokenLedger(symbol=token_symbol)
        self.directory = AuctionDirectory(self.bank, self.token)
        self.names: Dict[bytes, str] = {}

    def party(self, label: str) -> bytes:
        """Address of a party: a 0x-prefixed hex address as is, otherwise derived from the label."""
        from proxybid.crypto import ADDRESS_SIZE, address_from_label, hex_to_bytes
        from proxybid.utils.validation import validate_hex_string

        if label.startswith("0x"):
            valid, err = validate_hex_string(label, f"party {label!r}", expected_bytes=ADDRESS_SIZE)
            if not valid:
                raise click.ClickException(err)
            address = hex_to_bytes(label)
        else:
            address = address_from_label(label)
        self.names[address] = label
        return address

    def fund(self, label: str, amount: int) -> None:
        from proxybid.core.config import AssetMode

        address = self.party(label)
        if self.asset_mode == AssetMode.NATIVE:
            success, err = self.bank.mint(address, amount)
        else:
            success, err = self.token.mint(address, amount)
        if not success:
            raise click.ClickException(f"Cannot fund {label}: {err}")

    def balance(self, label: str) -> int:
        from proxybid.core.config import AssetMode

        address = self.party(label)
        if self.asset_mode == AssetMode.NATIVE:
            return self.bank.balance_of(address)
        return self.token.balance_of(address)

    def name_of(self, address: Optional[bytes]) -> str:
        from proxybid.crypto import bytes_to_hex

        if address is None:
            return "-"
        return self.names.get(address, bytes_to_hex(address))

    def bid(self, auction, label: str, amount: int, now: int) -> int:
        """Place a bid, approving the pull first in token mode."""
        from proxybid.core.config import AssetMode

        bidder = self.party(label)
        if self.asset_mode == AssetMode.TOKEN:
            self.token.approve(bidder, auction.address, amount)
        return auction.place_bid(bidder, amount, now=now)


def run_step(world: World, auction, step: dict) -> str:
    """Execute one script step and describe the outcome."""
    from proxybid.core.errors import AuctionError

    op, label, at = step["op"], step["party"], step["at"]
    caller = world.party(label)
    try:
        if op == "bid":
            pledge = world.bid(auction, label, step["amount"], at)
            return f"ok (pledge {pledge}, leader {world.name_of(auction.highest_bidder)}, binding {auction.highest_binding_bid})"
        if op == "cancel":
            auction.cancel_auction(caller)
        elif op == "finalize":
            auction.finalize_auction(caller, now=at)
        elif op == "end_early":
            auction.end_auction_early(caller, now=at)
        elif op == "withdraw":
            return f"ok (withdrew {auction.withdraw(caller)})"
        return "ok"
    except AuctionError as e:
        return f"{type(e).__name__}: {e}"


# =============================================================================
# Demo Command
# =============================================================================


@cli.command("demo")
@click.option("--asset", type=click.Choice(["native", "token"]), default="native", help="Asset mode")
@click.pass_context
def demo(ctx, asset):
    """Run the reference bidding scenario end to end"""
    from proxybid.core.config import AssetMode

    cfg = ctx.obj["config"]
    mode = AssetMode(asset)
    world = World(mode, token_symbol=cfg.token_symbol)

    click.echo("=" * 60)
    click.echo(f"  PROXYBID DEMO ({mode.value})")
    click.echo("=" * 60)
    click.echo()

    for label in ("xavier", "yolanda"):
        world.fund(label, 1000)

    auction_config = cfg.auction_config(
        seller=world.party("seller"),
        name="Demo lot",
        description="Reference scenario",
        start=1000,
        duration=1000,
        min_bid=0,
        min_increment=10,
        asset_mode=mode,
    )
    handle = world.directory.create_auction(auction_config)
    auction = world.directory.get_auction(handle)
    click.echo(f"🏛️  Auction created: increment 10, window [1000, 2000)")
    click.echo()

    steps = [
        {"op": "bid", "party": "xavier", "amount": 50, "at": 1000},
        {"op": "bid", "party": "yolanda", "amount": 70, "at": 1100},
        {"op": "bid", "party": "xavier", "amount": 15, "at": 1200},
        {"op": "bid", "party": "xavier", "amount": 25, "at": 1300},
        {"op": "finalize", "party": "seller", "at": 2001},
        {"op": "withdraw", "party": "yolanda", "at": 2002},
    ]
    for step in steps:
        amount = f" {step['amount']}" if "amount" in step else ""
        click.echo(f"  [t={step['at']}] {step['party']} {step['op']}{amount} -> {run_step(world, auction, step)}")

    click.echo()
    click.echo("📊 Final balances:")
    for label in ("seller", "xavier", "yolanda"):
        click.echo(f"  {label}: {world.balance(label)}")
    click.echo(f"  escrow: {auction.escrow_balance()}")
    click.echo()
    click.echo("✅ Demo complete!")


# =============================================================================
# Simulate Command
# =============================================================================


@cli.command("simulate")
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def simulate(ctx, script):
    """Replay a JSON auction script"""
    from pydantic import ValidationError

    from proxybid.core.config import AssetMode
    from proxybid.utils.validation import validate_amount, validate_step_data

    cfg = ctx.obj["config"]
    try:
        data = json.loads(Path(script).read_text())
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {script}: {e}")

    if not isinstance(data, dict) or "auction" not in data:
        raise click.ClickException("Script must be an object with an 'auction' section")

    try:
        mode = AssetMode(data.get("asset", "native"))
    except ValueError:
        raise click.ClickException(f"Unknown asset mode: {data.get('asset')!r}")

    world = World(mode, token_symbol=cfg.token_symbol)

    for label, amount in data.get("balances", {}).items():
        valid, err = validate_amount(amount)
        if not valid:
            raise click.ClickException(f"Balance of {label}: {err}")
        world.fund(label, amount)

    section = dict(data["auction"])
    seller_label = section.pop("seller", "seller")
    try:
        auction_config = cfg.auction_config(
            seller=world.party(seller_label),
            name=section.pop("name", "Simulated lot"),
            description=section.pop("description", ""),
            start=section.pop("start", 0),
            duration=section.pop("duration", None),
            min_bid=section.pop("min_bid", None),
            min_increment=section.pop("min_increment", None),
            asset_mode=mode,
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid auction section: {e}")
    if section:
        raise click.ClickException(f"Unknown auction keys: {', '.join(sorted(section))}")

    handle = world.directory.create_auction(auction_config)
    auction = world.directory.get_auction(handle)
    logger.info(f"Simulating {len(data.get('steps', []))} steps on {mode.value} auction")

    for i, step in enumerate(data.get("steps", [])):
        valid, err = validate_step_data(step)
        if not valid:
            raise click.ClickException(f"Step {i}: {err}")
        amount = f" {step['amount']}" if step["op"] == "bid" else ""
        click.echo(f"[t={step['at']}] {step['party']} {step['op']}{amount} -> {run_step(world, auction, step)}")

    info = auction.get_auction_info(now=data.get("report_at"))
    summary = info.to_dict()
    summary["highest_bidder"] = world.name_of(info.highest_bidder)
    summary["seller"] = seller_label
    click.echo(json.dumps(summary, indent=2))

    click.echo("Balances:")
    for address, label in sorted(world.names.items(), key=lambda item: item[1]):
        click.echo(f"  {label}: wallet={world.balance(label)} escrowed={auction.get_bid(address)}")


# =============================================================================
# Keygen Command
# =============================================================================


@cli.command("keygen")
@click.option("--count", default=1, type=click.IntRange(1, 100), help="Number of keypairs")
@click.option("--show-private", is_flag=True, help="Also print the private keys")
def keygen(count, show_private):
    """Generate party keypairs; their addresses can be used as script parties"""
    from proxybid.crypto import bytes_to_hex, generate_keypair

    for _ in range(count):
        kp = generate_keypair()
        click.echo(f"Address:     {bytes_to_hex(kp.address)}")
        click.echo(f"Public key:  {bytes_to_hex(kp.public_key)}")
        if show_private:
            click.echo(f"Private key: {bytes_to_hex(kp.private_key)}")
        logger.debug(f"Generated keypair for {bytes_to_hex(kp.address)}")


# =============================================================================
# Stats Command
# =============================================================================


@cli.command("stats")
@click.pass_context
def stats(ctx):
    """Show system statistics"""
    cfg = ctx.obj["config"]
    click.echo("proxybid System Statistics")
    click.echo("-" * 40)
    click.echo(f"  Version: {__version__}")
    click.echo("  Modules: Assets, Auction, Directory")
    click.echo(f"  Token symbol: {cfg.token_symbol}")
    click.echo(f"  Default increment: {cfg.default_min_increment}")
    click.echo(f"  Default duration: {cfg.default_duration}s")


if __name__ == "__main__":
    cli()
