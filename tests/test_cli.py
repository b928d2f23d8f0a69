"""
Test CLI (eurostarchecker.main): validazione argomenti, risoluzione stazioni,
exit code e output tabellare.

EurostarProvider viene sostituito con FakeProvider: nessuna chiamata HTTP.
Le date sono calcolate a partire da oggi perché la CLI rifiuta date passate.
"""
import logging
from datetime import date, time, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest

from conftest import LONDON, PARIS, FakeProvider, sample_legs
from eurostarchecker.main import build_arg_parser, build_criteria, main
from eurostarchecker.models.journey import SortBy, TimeWindow
from eurostarchecker.services.providers.base import ProviderError

TODAY = date.today()
# primo venerdì tra almeno una settimana
FRIDAY = TODAY + timedelta(days=7 + (4 - TODAY.weekday()) % 7)
NEXT_FRIDAY = FRIDAY + timedelta(days=7)


def _args(*extra: str) -> list[str]:
    return [
        "-a", "api-key",
        "-s", FRIDAY.isoformat(),
        "-u", (FRIDAY + timedelta(days=11)).isoformat(),
        "-d", "3",
        "-w", "friday",
        "-m", "100",
        "--out-departure-after", "18:00",
        "--in-departure-after", "18:00",
        "--in-departure-before", "21:00",
        *extra,
    ]


def _run(provider, argv) -> int:
    with patch("eurostarchecker.main.EurostarProvider", return_value=provider):
        return main(argv)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """main() riconfigura il root logger: lo ripristiniamo dopo ogni test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def provider():
    return FakeProvider(sample_legs(
        outbound_days=[FRIDAY, NEXT_FRIDAY],
        inbound_days=[FRIDAY + timedelta(days=3), NEXT_FRIDAY + timedelta(days=3)],
    ))


# ---------------------------------------------------------------------------
# Parsing argomenti → SearchCriteria
# ---------------------------------------------------------------------------

class TestBuildCriteria:

    def test_all_options_mapped(self):
        args = build_arg_parser().parse_args(_args("--adults", "2", "--sort-by", "DATE"))

        criteria = build_criteria(args, LONDON, PARIS)

        assert criteria.origin == LONDON
        assert criteria.destination == PARIS
        assert criteria.since == FRIDAY
        assert criteria.until == FRIDAY + timedelta(days=11)
        assert criteria.trip_length_days == 3
        assert criteria.weekdays == frozenset({4})
        assert criteria.adults == 2
        assert criteria.max_price == Decimal("100")
        assert criteria.outbound_window == TimeWindow(after=time(18, 0))
        assert criteria.inbound_window == TimeWindow(after=time(18, 0), before=time(21, 0))
        assert criteria.sort_by == SortBy.DATE

    def test_defaults(self):
        args = build_arg_parser().parse_args(["-d", "2"])

        criteria = build_criteria(args, LONDON, PARIS)

        assert args.origin == "London"
        assert args.destination == "Paris"
        assert criteria.since == TODAY
        assert criteria.until == TODAY + timedelta(weeks=2)
        assert criteria.weekdays is None
        assert criteria.max_price is None
        assert criteria.outbound_window == TimeWindow()
        assert criteria.sort_by == SortBy.PRICE

    def test_repeated_weekday(self):
        args = build_arg_parser().parse_args(["-d", "2", "-w", "friday", "-w", "Saturday"])
        assert build_criteria(args, LONDON, PARIS).weekdays == frozenset({4, 5})


# ---------------------------------------------------------------------------
# main — exit code e output
# ---------------------------------------------------------------------------

class TestMain:

    def test_prints_table(self, provider, capsys):
        assert _run(provider, _args()) == 0

        out = capsys.readouterr().out
        assert "Outbound (duration)" in out
        assert f"{FRIDAY.isoformat()} 18:01 (2h17m)" in out
        assert "88.50" in out

    def test_empty_result_is_success(self, capsys):
        assert _run(FakeProvider(), _args()) == 0
        assert "No journey matches the given criteria" in capsys.readouterr().out

    def test_provider_error_exit_code(self, capsys):
        failing = FakeProvider(fail_on={FRIDAY}, error=ProviderError("Got 503 Service Unavailable response: "))
        assert _run(failing, _args()) == 1
        assert "Outbound (duration)" not in capsys.readouterr().out

    def test_same_station_is_usage_error(self, provider):
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, _args("Paris", "Paris"))
        assert exc_info.value.code == 2
        assert provider.calls == []

    def test_missing_api_key(self, provider, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, _args() + ["-a", ""])
        assert exc_info.value.code == 2
        assert "API key" in capsys.readouterr().err

    def test_past_date_rejected(self, provider, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, _args("-s", "2020-06-19"))
        assert exc_info.value.code == 2
        assert "is in the past!" in capsys.readouterr().err

    def test_no_candidate_dates(self, provider, capsys):
        argv = ["-a", "api-key", "-s", FRIDAY.isoformat(), "-u", (FRIDAY + timedelta(days=1)).isoformat(),
                "-d", "3", "-w", "monday"]
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, argv)
        assert exc_info.value.code == 2
        assert "no date pairs" in capsys.readouterr().err
        assert provider.calls == []

    def test_unknown_station(self, capsys):
        provider = FakeProvider(stations={"Ashford": 7054660})
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, _args("London", "Berlin"))
        assert exc_info.value.code == 2
        assert "Invalid city name, choose from: Ashford, London, Paris." in capsys.readouterr().err

    def test_station_resolved_from_live_map(self, capsys):
        provider = FakeProvider(stations={"Ashford": 7054660})

        assert _run(provider, _args("Ashford", "Paris")) == 0

        assert {origin for origin, destination, _, _ in provider.calls if destination == PARIS} == {7054660}

    def test_invalid_adults_rejected_before_station_lookup(self, capsys):
        provider = FakeProvider(stations={"Ashford": 7054660})
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, _args("--adults", "0", "Ashford", "Paris"))
        assert exc_info.value.code == 2
        assert "at least 1 adult" in capsys.readouterr().err
        assert provider.station_lookups == 0
        assert provider.calls == []

    @pytest.mark.parametrize("value", ["abc", "-1", "nan"])
    def test_invalid_max_price(self, provider, value, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(provider, _args("-m", value))
        assert exc_info.value.code == 2
        assert "is not a valid price" in capsys.readouterr().err
