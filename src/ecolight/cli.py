"""
ecolight - Is there enough light here for my plant?

Point the device's ambient light sensor at a plant, measure for a few
seconds, and get a verdict against the plant's known light needs.

Usage:
    ecolight NAME                  # Measure for the configured duration
    ecolight NAME --duration 0     # Instant reading
    ecolight NAME --lux 3200       # Use a fixed value instead of the sensor
    ecolight                       # Pick the plant from the catalog
    ecolight --lookup NAME         # Show the light range for a plant
    ecolight --history             # Show stored analyses, newest first
    ecolight --catalog             # List known plant keywords
    ecolight --sensors             # Show available sensor backends
"""

from __future__ import annotations

import argparse
import json
import sys
import time

from rich.console import Console
from rich.live import Live
from rich.table import Table

from . import log as event_log
from .assembler import ResultAssembler
from .catalog import CatalogError, PlantCatalog, default_catalog
from .config import Settings, load_config
from .display import history_table, lux_to_condition, measurement_panel, record_panel
from .matcher import PlantMatcher
from .session import AnalysisSessionController
from .sensors import SensorFeed, discover_backends, get_best_backend
from .sensors.backends.fixed import FixedLuxBackend
from .storage import JsonRecordStore, StorageError

console = Console()


def load_catalog(settings: Settings) -> PlantCatalog:
    """The configured catalog file, or the built-in table."""
    if settings.catalog_file is not None:
        return PlantCatalog.load(settings.catalog_file)
    return default_catalog()


def choose_plant(catalog: PlantCatalog) -> str | None:
    """Interactive plant picker over the catalog's species."""
    from simple_term_menu import TerminalMenu

    names = [req.canonical_name for req in catalog.species()]
    if not names:
        return None
    menu = TerminalMenu(names, title="¿Qué planta quieres analizar?")
    index = menu.show()
    if index is None:
        return None
    return names[index]


def wait_for_key() -> bool:
    """Wait for the user to aim the sensor. Returns False if they cancel."""
    import readchar

    console.print("Apunta el sensor hacia la planta y pulsa una tecla para empezar [dim](q para cancelar)[/]")
    try:
        key = readchar.readkey()
    except KeyboardInterrupt:
        return False
    return key not in ("q", "Q", readchar.key.ESC, readchar.key.CTRL_C)


def show_sensors() -> None:
    """Display available sensor backends."""
    backends = discover_backends()

    console.print("Available sensor backends:")
    console.print()

    if not backends:
        console.print("  No sensor backends found for this platform.")
        return

    for backend in backends:
        status = "[green]available[/]" if backend["available"] else "[dim]not available[/]"
        console.print(f"  {backend['display_name']} [dim]({backend['name']}, {backend['platform']})[/]")
        console.print(f"    Status: {status}")
        console.print()

    best = get_best_backend()
    if best:
        console.print(f"Active backend: {best.name}")
        reading = best.read()
        if reading.is_valid:
            console.print(f"Current reading: {reading.lux:.1f} lux ({lux_to_condition(reading.lux)})")
        elif reading.error:
            console.print(f"[red]Error:[/] {reading.error}")


def show_catalog(catalog: PlantCatalog, as_json: bool) -> None:
    if as_json:
        print(json.dumps(catalog.to_dict(), indent=2, ensure_ascii=False))
        return

    table = Table(title=f"Catalog ({len(catalog)} keywords)", header_style="bold cyan", expand=True)
    table.add_column("keyword", style="bold", no_wrap=True)
    table.add_column("plant", no_wrap=True)
    table.add_column("lux", justify="right", no_wrap=True)
    table.add_column("description", ratio=1)
    for keyword, req in catalog:
        table.add_row(keyword, req.canonical_name, f"{req.min_lux}-{req.max_lux}", req.description)
    console.print(table)


def show_lookup(catalog: PlantCatalog, name: str, as_json: bool) -> int:
    requirement = PlantMatcher(catalog, search_delay=0).match(name)
    if as_json:
        print(json.dumps(requirement.to_dict() if requirement else None, ensure_ascii=False))
        return 0 if requirement else 1
    if requirement is None:
        console.print(f"[yellow]No catalog entry matches[/] {name!r}")
        return 1
    console.print(f"[bold]{requirement.canonical_name}[/]: {requirement.min_lux}-{requirement.max_lux} lx")
    console.print(f"[dim]{requirement.description}[/]")
    return 0


def show_history(store: JsonRecordStore, limit: int, as_json: bool) -> int:
    try:
        records = store.list_all()[:limit]
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
        return 0
    if not records:
        console.print("[yellow]No analyses recorded yet.[/]")
        console.print("Run: [bold]ecolight <plant name>[/]")
        return 0
    console.print(history_table(records))
    return 0


def run_analysis(
    settings: Settings,
    catalog: PlantCatalog,
    plant_name: str,
    image_ref: str | None,
    fixed_lux: float | None,
    as_json: bool,
    confirm: bool,
) -> int:
    """Measure, judge and store one analysis."""
    if fixed_lux is not None:
        backend = FixedLuxBackend(fixed_lux)
    else:
        backend = get_best_backend(settings.sensor_backend)
        if backend is None or not backend.is_available():
            print("Warning: no ambient light sensor found; readings default to 0 lx. Use --lux to supply a value.", file=sys.stderr)
            backend = None

    store = JsonRecordStore(settings.records_file)
    assembler = ResultAssembler(PlantMatcher(catalog, settings.search_delay), store)

    with SensorFeed(backend, settings.poll_interval) as feed:
        with AnalysisSessionController(feed, assembler, tick_interval=settings.tick_interval) as controller:
            if confirm and not as_json and not wait_for_key():
                return 130

            session = controller.start(plant_name, image_ref, settings.duration_seconds)
            if session is None:
                print("Error: another analysis is in progress", file=sys.stderr)
                return 1

            if not session.finished and not as_json:
                def render():
                    return measurement_panel(
                        plant_name,
                        controller.current_lux.value,
                        controller.progress.value,
                        controller.time_remaining.value,
                        searching=controller.is_searching.value,
                    )

                with Live(render(), console=console, refresh_per_second=10, transient=True) as live:
                    while not session.finished:
                        live.update(render())
                        time.sleep(settings.tick_interval)

            try:
                record = session.wait()
            except StorageError as e:
                print(f"Error: could not save the analysis: {e}", file=sys.stderr)
                return 1

    if as_json:
        print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    else:
        console.print(record_panel(record))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Check whether the ambient light suits a plant"
    )
    parser.add_argument("name", nargs="?", help="Plant name (free text, Spanish or English)")
    parser.add_argument("--duration", type=int, metavar="SECONDS", help="Measurement window (0 = instant)")
    parser.add_argument("--image", type=str, metavar="REF", help="Image reference stored with the record")
    parser.add_argument("--lux", type=float, help="Use a fixed lux value instead of the sensor")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--yes", "-y", action="store_true", help="Start measuring without waiting for a key")
    parser.add_argument("--lookup", type=str, metavar="NAME", help="Show the light range for a plant")
    parser.add_argument("--history", action="store_true", help="Show stored analyses")
    parser.add_argument("--limit", type=int, default=20, help="Number of analyses shown by --history")
    parser.add_argument("--catalog", action="store_true", help="List known plant keywords")
    parser.add_argument("--sensors", action="store_true", help="Show available sensor backends")
    parser.add_argument("--no-delay", action="store_true", help="Skip the simulated search latency")
    args = parser.parse_args(argv)

    if args.json:
        event_log.set_enabled(False)

    settings = load_config().override(
        duration_seconds=args.duration,
        search_delay=0.0 if args.no_delay else None,
    )
    if settings.duration_seconds < 0:
        parser.error("--duration must be >= 0")

    if args.sensors:
        show_sensors()
        return 0

    if args.history:
        return show_history(JsonRecordStore(settings.records_file), args.limit, args.json)

    try:
        catalog = load_catalog(settings)
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.catalog:
        show_catalog(catalog, args.json)
        return 0

    if args.lookup:
        return show_lookup(catalog, args.lookup, args.json)

    name = args.name
    if not name:
        if args.json or not sys.stdin.isatty():
            parser.error("a plant name is required")
        name = choose_plant(catalog)
        if not name:
            return 130

    return run_analysis(
        settings,
        catalog,
        name,
        args.image,
        args.lux,
        args.json,
        confirm=not args.yes and sys.stdin.isatty(),
    )


if __name__ == "__main__":
    sys.exit(main())
