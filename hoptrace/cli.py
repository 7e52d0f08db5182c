import math
import os
import sys
from pathlib import Path
from typing import Optional

import click
import dns.exception
from rich.console import Console

from . import __version__
from .config import Settings, MAX_HOPS, MAX_TIMEOUT, PROBES_PER_HOP, PROBE_TIMEOUT
from .enrichment import PTRResolver
from .logging import setup_logging, get_logger
from .models import Target, TraceResult
from .output import ConsoleOutput, JsonExporter
from .probe import HopProber, create_icmp_probe
from .resolver import ResolutionError, ResolvedHost, resolve, resolve_local


console = Console(highlight=False)
logger = get_logger("cli")


def is_admin() -> bool:
    """Check if running as root (raw sockets need it)"""
    return os.geteuid() == 0


def make_name_lookup(settings: Settings) -> Optional[PTRResolver]:
    """Reverse resolver for hop addresses, or None when lookups are off or unavailable"""
    if not settings.resolve_names:
        return None
    try:
        return PTRResolver()
    except dns.exception.DNSException as e:
        logger.warning("Reverse DNS disabled: %s", e)
        return None


def run_trace(hostname: str, target: Target, settings: Settings,
              output: ConsoleOutput) -> TraceResult:
    """
    Trace the route to one target address, printing each hop as it completes.
    """
    name_lookup = make_name_lookup(settings)

    with create_icmp_probe(target.version, settings.timeout,
                           settings.payload_size) as probe:
        prober = HopProber(probe, settings, name_lookup=name_lookup)
        session = prober.session(target)
        for hop in session:
            output.print_hop(hop)

    output.print_outcome(session)

    return TraceResult(
        hostname=hostname,
        target=target,
        status=session.status,
        hops=session.hops
    )


def check_finite(ctx, param, value: float) -> float:
    # FloatRange lets nan through since every comparison with it is false
    if not math.isfinite(value):
        raise click.BadParameter(f"{value} is not a finite number of seconds.")
    return value


def plan_traces(local: ResolvedHost,
                remote: ResolvedHost) -> list[Target]:
    """Targets to trace: one per IP version present on both ends, IPv4 first"""
    targets = []
    for version in (4, 6):
        if local.address(version) is not None:
            target = remote.address(version)
            if target is not None:
                targets.append(target)
    return targets


@click.command()
@click.argument('hostname')
@click.option('-m', '--max-hops', default=MAX_HOPS, type=click.IntRange(1, 255),
              help=f'Maximum hops (default: {MAX_HOPS})')
@click.option('-q', '--probes', default=PROBES_PER_HOP, type=click.IntRange(1, 10),
              help=f'Probes per hop (default: {PROBES_PER_HOP})')
@click.option('-w', '--timeout', default=PROBE_TIMEOUT,
              type=click.FloatRange(min=0, min_open=True, max=MAX_TIMEOUT),
              callback=check_finite,
              help=f'Timeout per probe in seconds (default: {PROBE_TIMEOUT:g})')
@click.option('--dns/--no-dns', default=True,
              help='Enable/disable PTR lookups of hop addresses (default: enabled)')
@click.option('--json', 'json_path', type=click.Path(),
              help='Export results to JSON file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--log-file', type=click.Path(), help='Also write log to this file')
@click.version_option(version=__version__, prog_name='hoptrace')
def main(hostname: str, max_hops: int, probes: int, timeout: float,
         dns: bool, json_path: Optional[str], debug: bool,
         log_file: Optional[str]):
    """
    hoptrace - dual-stack traceroute.

    Print the local and HOSTNAME addresses, then trace the route to
    HOSTNAME over IPv4 and IPv6 wherever both ends have an address of
    that family.

    Examples:

        hoptrace example.com

        hoptrace example.com -m 20 --no-dns --json trace.json
    """
    setup_logging(debug=debug, log_file=log_file)

    output = ConsoleOutput(console)
    settings = Settings(
        max_hops=max_hops,
        probes_per_hop=probes,
        timeout=timeout,
        resolve_names=dns
    )

    try:
        local = resolve_local()
        output.print_addresses(local)

        try:
            remote = resolve(hostname)
        except ResolutionError as e:
            output.print_error(str(e))
            sys.exit(1)

        output.print_addresses(remote)

        targets = plan_traces(local, remote)
        if targets and not is_admin():
            output.print_error("Root privileges required. Please run with sudo.")
            sys.exit(1)

        results: list[TraceResult] = []
        for target in targets:
            output.print_capability(target.label)
            results.append(run_trace(hostname, target, settings, output))
            output.print_separator()

        if json_path:
            json_file = Path(json_path)
            JsonExporter().export(results, json_file)
            console.print(f"[dim]Results exported to:[/] {json_file.absolute()}")

    except PermissionError as e:
        output.print_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/]")
        sys.exit(130)
    except Exception as e:
        output.print_error(f"Unexpected error: {e}")
        logger.debug("Unexpected error", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
