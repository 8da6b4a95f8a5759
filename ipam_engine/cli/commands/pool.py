"""
Pool inspection and dry-run allocation commands.
"""

from pathlib import Path
from typing import Optional

import typer
from oslo_config import cfg
from oslo_log import log as logging

from ipam_engine.configuration import register_opts
from ipam_engine.lib import address
from ipam_engine.pools import AddressPool, PoolSet

LOG = logging.getLogger(__name__)

app = typer.Typer(help="Address pool commands")


def load_pools(document: Optional[Path], config_file: Optional[Path]) -> PoolSet:
    """
    Build pools from an oslo.config file and/or a JSON controller document.

    Also sets up logging from the config file's [DEFAULT] logging options.
    """
    if document is None and config_file is None:
        raise ValueError("Either --document or --config-file is required")

    conf = cfg.ConfigOpts()
    register_opts(conf)
    logging.register_options(conf)
    conf(
        args=[],
        project="ipam-engine",
        default_config_files=[str(config_file)] if config_file else [],
        default_config_dirs=[],
    )
    logging.setup(conf, "ipam-engine")

    pools = PoolSet.from_conf(conf)
    if document is not None:
        pools.load_document(document.read_text(encoding="utf-8"))
    return pools


def _echo_free_list(pool: AddressPool) -> None:
    for family in (4, 6):
        ranges = pool.free_list(family)
        if not ranges:
            continue
        typer.echo(
            f"{pool.name} ipv{family} free={pool.free_count(family)} "
            f"ranges={', '.join(str(r) for r in ranges)}"
        )


@app.command()
def show(
    document: Optional[Path] = typer.Option(None, "--document", help="JSON controller configuration document"),
    config_file: Optional[Path] = typer.Option(None, "--config-file", help="ipam-engine configuration file"),
):
    """
    Show the free list of every configured pool.
    """
    try:
        pools = load_pools(document, config_file)
        empty = True
        for pool in pools:
            if pool.free_count(4) or pool.free_count(6):
                empty = False
                _echo_free_list(pool)
        if empty:
            typer.echo("No pools configured")

    except Exception as e:
        typer.echo(f"Error loading pools: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def allocate(
    name: str = typer.Argument(..., help="Pool name (pod, service, static-service, node-service)"),
    document: Optional[Path] = typer.Option(None, "--document", help="JSON controller configuration document"),
    config_file: Optional[Path] = typer.Option(None, "--config-file", help="ipam-engine configuration file"),
    count: int = typer.Option(1, "--count", min=1, help="Number of allocations to perform"),
    chunk: bool = typer.Option(False, "--chunk", help="Allocate address blocks instead of single addresses"),
    family: int = typer.Option(4, "--family", help="Address family (4 or 6)"),
):
    """
    Allocate from a freshly seeded pool and print the results.

    Nothing is persisted; this shows what a controller would hand out.
    """
    try:
        pools = load_pools(document, config_file)
        pool = pools.pool(name)

        typer.echo(f"Allocating from pool: {name}")
        allocated = 0
        for _ in range(count):
            if chunk:
                ranges = pool.get_ip_chunk(family)
                text = ", ".join(str(r) for r in ranges)
                allocated += sum(r.size for r in ranges)
                typer.echo(f"  chunk: {text}")
            else:
                text = address.to_text(pool.get_ip(family))
                allocated += 1
                typer.echo(f"  ip: {text}")
            LOG.info("Dry-run allocated %s from pool %s", text, name)

        typer.echo(f"Allocated {allocated} addresses from pool {name} (ipv{family})")

        _echo_free_list(pool)

    except Exception as e:
        typer.echo(f"Error allocating from pool {name}: {e}", err=True)
        raise typer.Exit(1)
