"""
Adattatore di presentazione: JourneyPair ordinate → righe pronte per la tabella.

Il motore non stampa nulla; solo render_table scrive sulla console (rich).
"""
from collections.abc import Iterable
from datetime import datetime, timedelta

from rich.console import Console
from rich.table import Table

from eurostarchecker.models.journey import JourneyPair
from eurostarchecker.models.schemas import JourneyRowOut

RESULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M"


def format_duration(duration: timedelta) -> str:
    """timedelta(minutes=137) → "2h17m"."""
    total_minutes = int(duration.total_seconds()) // 60
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h{minutes}m"


def _format_leg(departure: datetime, duration: timedelta) -> str:
    return f"{departure.strftime(RESULT_DATETIME_FORMAT)} ({format_duration(duration)})"


def build_rows(pairs: Iterable[JourneyPair]) -> list[JourneyRowOut]:
    """Una riga per coppia, nello stesso ordine ricevuto."""
    return [
        JourneyRowOut(
            outbound=_format_leg(pair.outbound.departure, pair.outbound.duration),
            inbound=_format_leg(pair.inbound.departure, pair.inbound.duration),
            price=pair.combined_price,
        )
        for pair in pairs
    ]


def render_table(rows: Iterable[JourneyRowOut], console: Console | None = None) -> None:
    table = Table("Outbound (duration)", "Inbound (duration)", "Price", show_lines=False)
    for row in rows:
        table.add_row(row.outbound, row.inbound, f"{row.price:.2f}")
    (console or Console()).print(table)
