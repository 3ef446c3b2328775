"""Command-line front end for huebridge."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .bridge import AuthenticatedBridge, Bridge
from .config import DEFAULT_CONFIG_FILE, HueConfig
from .discovery import discover_bridge
from .errors import HueError, ValidationError
from .models import CommandLight, IdentifiedLight
from .transport import HttpTransport


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="huebridge", description="Control lights through a Hue bridge.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_FILE, help="configuration file")
    parser.add_argument("--address", help="bridge address, overrides the configured one")
    parser.add_argument("--username", help="bridge username, overrides the configured one")
    parser.add_argument("--timeout", type=float, help="request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    discover = subparsers.add_parser("discover", help="find a bridge on the local network")
    discover.add_argument("--save", action="store_true", help="store the address in the active profile")

    register = subparsers.add_parser("register", help="register a user (press the link button first)")
    register.add_argument("new_username", metavar="USERNAME", help="10 to 40 characters")
    register.add_argument("--devicetype", help="application and device name, e.g. my_app#laptop")
    register.add_argument("--save", action="store_true", help="store the username in the active profile")

    subparsers.add_parser("lights", help="list all lights")

    set_state = subparsers.add_parser("set", help="change the state of a light")
    set_state.add_argument("light_id", type=int, metavar="LIGHT_ID")
    power = set_state.add_mutually_exclusive_group()
    power.add_argument("--on", dest="on", action="store_const", const=True, default=None)
    power.add_argument("--off", dest="on", action="store_const", const=False)
    set_state.add_argument("--bri", type=int, help="brightness, 0-255")
    set_state.add_argument("--hue", type=int, help="hue, 0-65535")
    set_state.add_argument("--sat", type=int, help="saturation, 0-255")
    set_state.add_argument("--transitiontime", type=int, help="transition time in multiples of 100ms")

    return parser


def _build_command(args: argparse.Namespace) -> CommandLight:
    command = CommandLight.empty()
    if args.on is not None:
        command = command.with_on(args.on)
    if args.bri is not None:
        command = command.with_bri(args.bri)
    if args.hue is not None:
        command = command.with_hue(args.hue)
    if args.sat is not None:
        command = command.with_sat(args.sat)
    if args.transitiontime is not None:
        command = command.with_transitiontime(args.transitiontime)
    return command


def _lights_table(lights: list[IdentifiedLight]) -> Table:
    table = Table(show_header=True, header_style="bold cyan", box=box.SIMPLE)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="green")
    table.add_column("On", justify="center")
    table.add_column("Bri", justify="right")
    table.add_column("Reachable", justify="center")
    table.add_column("Type", style="yellow")

    for identified in lights:
        light = identified.light
        table.add_row(
            str(identified.id),
            escape(light.name),
            "[green]on[/]" if light.state.on else "[dim]off[/]",
            str(light.state.bri),
            "yes" if light.state.reachable else "[red]no[/]",
            escape(light.type),
        )
    return table


def _require_bridge(
    config: HueConfig, args: argparse.Namespace, transport: Optional[HttpTransport]
) -> Bridge:
    if args.address:
        config.set_address(config.active_bridge, args.address)
    bridge = config.build_bridge(username=args.username, transport=transport)
    if bridge is None:
        raise ValidationError("no bridge configured; run 'huebridge discover --save' or pass --address")
    return bridge


def _require_user(bridge: Bridge) -> AuthenticatedBridge:
    if not isinstance(bridge, AuthenticatedBridge):
        raise ValidationError("no username configured; run 'huebridge register' or pass --username")
    return bridge


def _run(
    args: argparse.Namespace,
    config: HueConfig,
    console: Console,
    transport: Optional[HttpTransport],
) -> None:
    if args.command == "discover":
        if args.address:
            raise ValidationError("--address cannot be combined with discover")
        bridge = Bridge.discover(
            timeout=config.timeout,
            discover=lambda: discover_bridge(
                timeout=config.timeout, url=config.discovery_url, transport=transport
            ),
            transport=transport,
        )
        with bridge:
            console.print(f"Bridge found at [bold]{escape(bridge.address)}[/]")
            if args.save:
                config.set_address(config.active_bridge, bridge.address)
                config.save(args.config)
                console.print(f"[dim]Saved to {escape(str(args.config))}[/]")
        return

    with _require_bridge(config, args, transport) as bridge:
        _run_bridge_command(args, config, console, bridge)


def _run_bridge_command(args: argparse.Namespace, config: HueConfig, console: Console, bridge: Bridge) -> None:
    if args.command == "register":
        registration = bridge.register_user(args.devicetype or config.devicetype, args.new_username)
        console.print(f"Registered username [bold]{escape(registration.username)}[/]")
        if args.save:
            config.set_username(config.active_bridge, registration.username)
            config.save(args.config)
            console.print(f"[dim]Saved to {escape(str(args.config))}[/]")
    elif args.command == "lights":
        lights = _require_user(bridge).get_all_lights()
        if not lights:
            console.print("[yellow]No lights found.[/]")
            return
        console.print(_lights_table(lights))
    elif args.command == "set":
        result = _require_user(bridge).set_light_state(args.light_id, _build_command(args))
        if not result.successes:
            console.print("[yellow]Nothing to change.[/]")
        for address, value in result.successes.items():
            console.print(f"[green]✓[/] {escape(address)} = {escape(str(value))}")


def main(argv: Optional[Sequence[str]] = None, transport: Optional[HttpTransport] = None) -> int:
    """
    Run the command line.

    Args:
        argv: Arguments, defaults to ``sys.argv[1:]``
        transport: Optional transport shared by every request

    Returns:
        Process exit code
    """
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    console = Console()

    config = HueConfig.load(args.config)
    if args.timeout is not None:
        config.timeout = args.timeout

    try:
        _run(args, config, console, transport)
    except HueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        return 1
    return 0
