"""Rich renderables for measurements and stored records."""

from __future__ import annotations

from rich import box
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .records import PersistedRequestRecord


def lux_to_condition(lux: float) -> str:
    """
    Describe an illuminance level.

        0-50:         dark (night, closets)
        50-500:       dim (typical room interior)
        500-2000:     indoor bright (near a window, well lit)
        2000-10000:   bright (filtered daylight, overcast outdoor)
        10000-30000:  daylight (full daylight, no direct sun)
        30000+:       sunlight (direct sun)
    """
    if lux < 50:
        return "dark"
    elif lux < 500:
        return "dim"
    elif lux < 2000:
        return "indoor bright"
    elif lux < 10000:
        return "bright"
    elif lux < 30000:
        return "daylight"
    else:
        return "sunlight"


def progress_bar(fraction: float, width: int = 30) -> str:
    """Create a slider-style progress bar."""
    fraction = max(0.0, min(1.0, fraction))
    pos = int(fraction * (width - 1))
    # Slider style: ━━━━━━━━━●─────────────────────
    return "━" * pos + "●" + "─" * (width - 1 - pos)


def measurement_panel(
    plant_name: str,
    lux: float,
    progress: float,
    time_remaining: int,
    searching: bool = False,
) -> Panel:
    """Live view of a running measurement."""
    text = Text()
    text.append(f"{lux:8.1f} lx", style="bold cyan")
    text.append(f"  {lux_to_condition(lux)}\n\n", style="dim")
    if searching:
        text.append("Buscando requisitos de luz...", style="yellow")
    else:
        text.append(progress_bar(progress), style="cyan")
        text.append(f" {progress * 100:5.1f}%  ", style="bold")
        text.append(f"{time_remaining}s", style="dim")
    return Panel(text, title=plant_name, title_align="left", border_style="cyan", padding=(1, 2))


def verdict_style(is_suitable: bool | None) -> str:
    return {True: "green", False: "red"}.get(is_suitable, "yellow")


def record_panel(record: PersistedRequestRecord) -> Panel:
    """Summary of a finished analysis."""
    text = Text()
    verdict = {True: "Adecuada", False: "No adecuada"}.get(record.is_suitable, "Sin datos")
    text.append(f"{verdict}\n", style=f"bold {verdict_style(record.is_suitable)}")
    text.append(f"Promedio: {record.average_lux:.1f} lx ({lux_to_condition(record.average_lux)})")
    if record.min_light_level is not None and record.max_light_level is not None:
        text.append(f"  rango {record.min_light_level:.0f}-{record.max_light_level:.0f} lx", style="dim")
    if record.readings_trace:
        text.append(f"\nMuestras: {len(record.readings_trace)}", style="dim")
    text.append(f"\n\n{record.recommendation}")
    return Panel(text, title=record.plant_name, title_align="left", border_style=verdict_style(record.is_suitable))


def history_table(records: list[PersistedRequestRecord]) -> Table:
    """Table of records, in the order given (most recent first)."""
    table = Table(
        title=f"Analyses ({len(records)} total)",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
        padding=(0, 1),
        expand=True,
    )
    table.add_column("#", style="dim", no_wrap=True, width=4)
    table.add_column("when", style="dim", no_wrap=True, width=16)
    table.add_column("plant", style="bold", no_wrap=True, width=22)
    table.add_column("lux", justify="right", no_wrap=True, width=9)
    table.add_column("ok", no_wrap=True, width=3)
    table.add_column("recommendation", no_wrap=False, ratio=1)

    for record in records:
        mark = {True: "[green]✓[/]", False: "[red]✗[/]"}.get(record.is_suitable, "?")
        table.add_row(
            str(record.id or ""),
            record.timestamp.strftime("%Y-%m-%d %H:%M"),
            record.plant_name[:22],
            f"{record.average_lux:.0f}",
            mark,
            record.recommendation,
        )
    return table
