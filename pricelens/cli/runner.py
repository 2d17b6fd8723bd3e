# pricelens/cli/runner.py

"""Headless CLI runner: scrape, compare, unify, health-check, serve."""

import json
import logging
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from pricelens.config.settings import Settings
from pricelens.services.price_orchestrator import PriceOrchestrator

logger = logging.getLogger("pricelens.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def resolve_platforms(
    platform_csv: str | None,
) -> list[dict[str, str]]:
    """Map a comma-separated list of platform IDs to their registry dicts.

    Returns all platforms when *platform_csv* is ``None``.
    Raises ``SystemExit`` on unknown IDs.
    """
    available = {p["id"]: p for p in Settings.AVAILABLE_PLATFORMS}
    if platform_csv is None:
        return Settings.AVAILABLE_PLATFORMS

    requested = [
        p.strip() for p in platform_csv.split(",") if p.strip()
    ]
    unknown = [r for r in requested if r not in available]
    if unknown:
        valid = ", ".join(sorted(available))
        _err.print(
            f"[red]Unknown platform(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)

    return [available[r] for r in requested]


def _print_table(envelopes: dict[str, dict[str, Any]]) -> None:
    """Render a Rich comparison table to stdout."""
    table = Table(
        title="Price Comparison",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Platform", style="magenta")
    table.add_column("Title", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("MRP", justify="right", style="dim")
    table.add_column("Discount", justify="right")
    table.add_column("Rating", justify="center")
    table.add_column("Link", overflow="fold", style="dim")

    for platform_id, envelope in envelopes.items():
        if not envelope.get("success"):
            table.add_row(
                platform_id,
                f"[red]{envelope.get('error', 'failed')}[/red]",
                "—", "—", "—", "—", "",
            )
            continue
        data = envelope["data"]
        stars = data["rating"].get("stars")
        table.add_row(
            platform_id,
            str(data["title"])[:50],
            str(data["price"]),
            data["mrp"] or "—",
            data["discount"] or "—",
            str(stars) if stars is not None else "—",
            data["productLink"],
        )

    Console().print(table)


async def cli_scrape(
    query: str,
    platform_csv: str | None,
    output_format: str,
) -> int:
    """Scrape *query* on the selected platforms; 0 if all succeeded."""
    platforms = resolve_platforms(platform_csv)
    labels = ", ".join(p["label"] for p in platforms)
    _err.print(
        f"[bold]Searching:[/bold] {query}  [dim]platforms={labels}[/dim]"
    )

    result = await PriceOrchestrator().compare(query, platforms)

    for platform_id in result.failed:
        error = result.envelopes[platform_id].get("error")
        _err.print(f"[red]{platform_id}: {error}[/red]")
    if result.succeeded:
        _err.print(
            f"[green]✓ {len(result.succeeded)} of"
            f" {len(result.envelopes)} platforms scraped[/green]"
        )

    if output_format == "table":
        _print_table(result.envelopes)
    else:
        payload: Any = (
            next(iter(result.envelopes.values()))
            if len(result.envelopes) == 1
            else result.envelopes
        )
        json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")

    return 0 if not result.failed else 1


def run_unify(link: str) -> int:
    """Print the unified product name for *link*."""
    from pricelens.services.name_unifier import NameUnifier, UnifierError

    try:
        name = NameUnifier().unify(link)
    except UnifierError as exc:
        _err.print(f"[red]Unification failed: {exc}[/red]")
        return 1
    sys.stdout.write(f"{name}\n")
    return 0


def run_server() -> int:
    """Start the Flask API (development server)."""
    from pricelens.api.server import create_app

    app = create_app()
    _err.print(
        f"[bold]Serving on {Settings.API_HOST}:{Settings.API_PORT}[/bold]"
        f" [dim]env={Settings.APP_ENV}[/dim]"
    )
    app.run(
        host=Settings.API_HOST,
        port=Settings.API_PORT,
        debug=Settings.APP_ENV == "development",
    )
    return 0


async def run_health_check() -> int:
    """Run connectivity health check on all platforms."""
    from pricelens.services.health_checker import HealthChecker

    _err.print("[bold]Running platform health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Platform Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Platform", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        elif r.status == "blocked":
            status = "[yellow]🛑 BLOCKED[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(
            r.platform_id, status, latency, r.message,
        )

    Console().print(table)
    return 1 if any_down else 0
