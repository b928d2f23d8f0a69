"""
Fixture condivise per la test suite eurostarchecker.

Il provider HTTP reale non viene mai chiamato: il motore viene testato con
FakeProvider (corse in memoria), EurostarProvider con httpx.MockTransport.
"""
import asyncio
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from eurostarchecker.models.journey import Leg, SearchCriteria, TimeWindow
from eurostarchecker.services.providers.base import LegProvider, ProviderError

RESOURCES = Path(__file__).parent / "resources"

LONDON = 7015400
PARIS = 8727100


def make_leg(day: date, hh_mm: str, price, minutes: int = 137) -> Leg:
    hour, minute = (int(part) for part in hh_mm.split(":"))
    return Leg(
        departure=datetime.combine(day, time(hour, minute)),
        duration=timedelta(minutes=minutes),
        price=Decimal(str(price)),
    )


class FakeProvider(LegProvider):
    """
    Provider in memoria: legs[(origin, destination, day)] → lista di Leg.

    delays  — secondi di attesa per data (per simulare completamenti fuori ordine)
    fail_on — date per cui fetch_legs solleva `error`
    """

    def __init__(self, legs=None, delays=None, fail_on=(), error=None, stations=None):
        self.legs = legs or {}
        self.delays = delays or {}
        self.fail_on = set(fail_on)
        self.error = error or ProviderError("Got 500 Internal Server Error response: server crashed")
        self.stations = stations or {}
        self.calls: list[tuple[int, int, date, int]] = []
        self.completed: list[tuple[int, int, date]] = []
        self.station_lookups = 0

    async def fetch_legs(self, origin, destination, day, adults=1):
        self.calls.append((origin, destination, day, adults))
        if day in self.delays:
            await asyncio.sleep(self.delays[day])
        if day in self.fail_on:
            raise self.error
        self.completed.append((origin, destination, day))
        return list(self.legs.get((origin, destination, day), []))

    async def fetch_stations(self):
        self.station_lookups += 1
        return dict(self.stations)


# ---------------------------------------------------------------------------
# Dati di esempio Londra ⇄ Parigi (venerdì → lunedì, giugno 2020)
# ---------------------------------------------------------------------------

def sample_legs(outbound_days, inbound_days) -> dict:
    """
    Per ogni venerdì: 2 andate utili (29) + una troppo presto + una troppo cara.
    Per ogni lunedì: ritorni a 29 / 59.5 / 59.5 nella finestra 18-21 + due fuori finestra.
    """
    legs = {}
    for day in outbound_days:
        legs[(LONDON, PARIS, day)] = [
            make_leg(day, "17:01", 29.0),
            make_leg(day, "18:01", 29.0),
            make_leg(day, "19:01", 29.0),
            make_leg(day, "20:01", 89.0),
        ]
    for day in inbound_days:
        legs[(PARIS, LONDON, day)] = [
            make_leg(day, "15:13", 29.0, minutes=149),
            make_leg(day, "18:13", 29.0, minutes=149),
            make_leg(day, "19:13", 59.5, minutes=149),
            make_leg(day, "20:13", 59.5, minutes=149),
            make_leg(day, "21:13", 29.0, minutes=149),
        ]
    return legs


@pytest.fixture
def june_provider():
    return FakeProvider(sample_legs(
        outbound_days=[date(2020, 6, 19), date(2020, 6, 26)],
        inbound_days=[date(2020, 6, 22), date(2020, 6, 29)],
    ))


@pytest.fixture
def june_criteria():
    """Criteri dello scenario end-to-end: venerdì, 3 giorni, max 100, sera."""
    return SearchCriteria(
        origin=LONDON,
        destination=PARIS,
        since=date(2020, 6, 19),
        until=date(2020, 6, 30),
        trip_length_days=3,
        weekdays=frozenset({4}),
        max_price=Decimal("100"),
        outbound_window=TimeWindow(after=time(18, 0)),
        inbound_window=TimeWindow(after=time(18, 0), before=time(21, 0)),
    )


@pytest.fixture
def response_json() -> str:
    return (RESOURCES / "response.json").read_text(encoding="utf-8")


@pytest.fixture
def stations_json() -> str:
    return (RESOURCES / "stations.json").read_text(encoding="utf-8")
