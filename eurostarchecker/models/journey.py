"""
Entità del motore di ricerca andata/ritorno.

Tutte immutabili (frozen): create dal provider o dalla CLI, lette dal motore,
scartate dopo l'output.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum


class SortBy(str, Enum):
    PRICE = "price"
    DATE = "date"


@dataclass(frozen=True)
class Leg:
    """Una singola corsa in una direzione, con la sua tariffa."""
    departure: datetime    # ora locale del provider (naive)
    duration: timedelta
    price: Decimal         # importo esatto, mai float


def _minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


@dataclass(frozen=True)
class TimeWindow:
    """
    Finestra oraria di partenza [after, before], estremi inclusi.
    None su un lato = nessun vincolo su quel lato.
    """
    after: time | None = None
    before: time | None = None

    def contains(self, moment: datetime) -> bool:
        minute = _minute_of_day(moment.time())
        if self.after is not None and minute < _minute_of_day(self.after):
            return False
        if self.before is not None and minute > _minute_of_day(self.before):
            return False
        return True


@dataclass(frozen=True)
class SearchCriteria:
    origin: int
    destination: int
    since: date
    until: date
    trip_length_days: int
    weekdays: frozenset[int] | None = None   # numerazione Python: lun=0 … dom=6
    adults: int = 1
    outbound_window: TimeWindow = TimeWindow()
    inbound_window: TimeWindow = TimeWindow()
    max_price: Decimal | None = None
    sort_by: SortBy = SortBy.PRICE


@dataclass(frozen=True)
class JourneyPair:
    """Combinazione andata + ritorno considerata come un'unica opzione."""
    outbound: Leg
    inbound: Leg

    @property
    def combined_price(self) -> Decimal:
        return self.outbound.price + self.inbound.price
