"""
Utility per le date — enumerazione delle date candidate e parsing delle opzioni CLI.

Usate da:
  - journey_engine (enumerazione date di andata/ritorno)
  - main (parsing di --since/--until/--days/--weekday/--*-departure-*)
"""
from collections.abc import Iterable, Iterator
from datetime import date, datetime, time, timedelta

USER_DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
NOW = "now"
PLUS_TWO_WEEKS = "+2 weeks"

WEEKDAYS: dict[str, int] = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}


class CandidateDates:
    """
    Sequenza finita, ordinata e riavviabile delle date di andata candidate.

    Ogni iter() riparte da since; il filtro sui giorni della settimana
    è un semplice predicato sulla data.
    """

    def __init__(self, since: date, until: date, weekdays: Iterable[int] | None = None) -> None:
        self.since = since
        self.until = until
        self.weekdays = frozenset(weekdays) if weekdays is not None else None

    def _matches(self, day: date) -> bool:
        return self.weekdays is None or day.weekday() in self.weekdays

    def __iter__(self) -> Iterator[date]:
        current = self.since
        while current <= self.until:
            if self._matches(current):
                yield current
            current += timedelta(days=1)


def candidate_dates(since: date, until: date, weekdays: Iterable[int] | None = None) -> CandidateDates:
    return CandidateDates(since, until, weekdays)


def inbound_date(outbound: date, trip_length_days: int) -> date:
    return outbound + timedelta(days=trip_length_days)


def travel_dates(
    since: date,
    until: date,
    trip_length_days: int,
    weekdays: Iterable[int] | None = None,
) -> list[tuple[date, date]]:
    """Coppie (data andata, data ritorno) in ordine crescente di andata."""
    return [
        (day, inbound_date(day, trip_length_days))
        for day in candidate_dates(since, until, weekdays)
    ]


# ---------------------------------------------------------------------------
# Parsing opzioni
# ---------------------------------------------------------------------------

def parse_date(value: str, today: date | None = None) -> date:
    """
    Accetta YYYY-MM-DD, "now" oppure "+2 weeks".
    Le date nel passato vengono rifiutate.
    """
    today = today or date.today()
    if value == NOW:
        return today
    if value == PLUS_TWO_WEEKS:
        return today + timedelta(weeks=2)

    parsed = datetime.strptime(value, USER_DATE_FORMAT).date()
    if parsed < today:
        raise ValueError(f"{parsed} is in the past!")
    return parsed


def parse_weekday(value: str) -> int:
    weekday = WEEKDAYS.get(value.lower())
    if weekday is None:
        raise ValueError(f"{value} is an invalid weekday name!")
    return weekday


def parse_time(value: str) -> time:
    return datetime.strptime(value, TIME_FORMAT).time()


def parse_days(value: str) -> int:
    days = int(value)
    if days < 1:
        raise ValueError(f"{value} must be at least 1 day")
    return days
