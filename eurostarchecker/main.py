"""
CLI eurostarchecker — cerca viaggi andata/ritorno Eurostar e li stampa in tabella.

Esempio:
    eurostarchecker -s 2020-06-19 -u 2020-06-30 -d 3 -w friday -m 100 \
        --out-departure-after 18:00 --in-departure-after 18:00 --in-departure-before 21:00 \
        London Paris

Exit code: 0 successo (anche senza risultati), 1 errore del provider, 2 errore di input.
"""
import argparse
import asyncio
import logging
import sys
import warnings
from collections.abc import Callable, Sequence
from decimal import Decimal, InvalidOperation

from eurostarchecker.config import settings
from eurostarchecker.models.journey import JourneyPair, SearchCriteria, SortBy, TimeWindow
from eurostarchecker.services.journey_engine import EmptyResultWarning, InvalidCriteriaError, find_journeys
from eurostarchecker.services.presentation import build_rows, render_table
from eurostarchecker.services.providers.base import ProviderError
from eurostarchecker.services.providers.eurostar import STATION_TO_ID, EurostarProvider
from eurostarchecker.utils.dates import (
    NOW,
    PLUS_TWO_WEEKS,
    parse_date,
    parse_days,
    parse_time,
    parse_weekday,
    travel_dates,
)

logger = logging.getLogger(__name__)


def setup_logging(verbosity: int = 0) -> None:
    """-v → INFO, -vv → DEBUG; di default solo WARNING e superiori, su stderr."""
    level = logging.WARNING if verbosity <= 0 else logging.INFO if verbosity == 1 else logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _arg(parse: Callable) -> Callable:
    """Adatta un parser di utils.dates a `type=` di argparse (messaggio d'errore leggibile)."""
    def wrapper(value: str):
        try:
            return parse(value)
        except ValueError as exc:
            raise argparse.ArgumentTypeError(str(exc)) from exc
    wrapper.__name__ = parse.__name__
    return wrapper


def parse_price(value: str) -> Decimal:
    """Prezzo massimo da CLI come Decimal, esatto al centesimo (es. 17.33)."""
    try:
        price = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"{value} is not a valid price") from None
    if not price.is_finite() or price < 0:
        raise ValueError(f"{value} is not a valid price")
    return price


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="eurostarchecker", description="Find cheap Eurostar round trips")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Verbose mode (-v, -vv)")
    p.add_argument("-s", "--since", metavar="YYYY-MM-DD", type=_arg(parse_date), default=NOW,
                   help="Since what date we should look")
    p.add_argument("-u", "--until", metavar="YYYY-MM-DD", type=_arg(parse_date), default=PLUS_TWO_WEEKS,
                   help="To what date we should look")
    p.add_argument("-d", "--days", type=_arg(parse_days), required=True,
                   help="Number of days to stay (e.g. Friday - Monday would be 3 days)")
    p.add_argument("-w", "--weekday", action="append", type=_arg(parse_weekday),
                   help="Which days of the week should be considered as a start of a journey (repeatable)")
    # Finestre orarie
    p.add_argument("--out-departure-after", metavar="HH:MM", type=_arg(parse_time),
                   help="Only consider outbound trains departing at or after this time")
    p.add_argument("--out-departure-before", metavar="HH:MM", type=_arg(parse_time),
                   help="Only consider outbound trains departing at or before this time")
    p.add_argument("--in-departure-after", metavar="HH:MM", type=_arg(parse_time),
                   help="Only consider inbound trains departing at or after this time")
    p.add_argument("--in-departure-before", metavar="HH:MM", type=_arg(parse_time),
                   help="Only consider inbound trains departing at or before this time")
    # Prezzo / passeggeri
    p.add_argument("-m", "--max-price", type=_arg(parse_price), help="Max price per journey")
    p.add_argument("--adults", type=int, default=1, help="How many adults")
    # Misc
    p.add_argument("-a", "--api-key", default=settings.eurostar_api_key,
                   help="Eurostar API key (default: EUROSTAR_API_KEY)")
    p.add_argument("--sort-by", type=str.lower, choices=[s.value for s in SortBy], default=SortBy.PRICE.value,
                   help="How results should be sorted")
    p.add_argument("origin", nargs="?", default="London", metavar="from", help="Start station")
    p.add_argument("destination", nargs="?", default="Paris", metavar="to", help="Finish station")
    return p


async def resolve_stations(names: Sequence[str], provider: EurostarProvider) -> list[int]:
    """
    Nome stazione → stationId. La mappa live viene scaricata solo se
    almeno un nome non è tra le stazioni note.
    """
    stations = dict(STATION_TO_ID)
    if any(name not in stations for name in names):
        stations.update(await provider.fetch_stations())

    ids: list[int] = []
    for name in names:
        if name not in stations:
            raise InvalidCriteriaError(f"Invalid city name, choose from: {', '.join(sorted(stations))}.")
        ids.append(stations[name])
    return ids


def build_criteria(args: argparse.Namespace, origin: int, destination: int) -> SearchCriteria:
    return SearchCriteria(
        origin=origin,
        destination=destination,
        since=args.since,
        until=args.until,
        trip_length_days=args.days,
        weekdays=frozenset(args.weekday) if args.weekday else None,
        adults=args.adults,
        outbound_window=TimeWindow(after=args.out_departure_after, before=args.out_departure_before),
        inbound_window=TimeWindow(after=args.in_departure_after, before=args.in_departure_before),
        max_price=args.max_price,
        sort_by=SortBy(args.sort_by),
    )


async def _search(args: argparse.Namespace, provider: EurostarProvider) -> list[JourneyPair]:
    origin, destination = await resolve_stations([args.origin, args.destination], provider)
    return await find_journeys(build_criteria(args, origin, destination), provider)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger.debug("Parsed opts: %s", args)

    #Validation area -------------------------------------------
    if not args.api_key:
        parser.error("an API key is required (--api-key or EUROSTAR_API_KEY)")
    if args.origin == args.destination:
        parser.error("Start and finish stations need to be different!")
    if args.adults < 1:
        parser.error(f"at least 1 adult is required, got {args.adults}")
    if args.since > args.until:
        parser.error(f"--since ({args.since}) must not be after --until ({args.until})")
    if not travel_dates(args.since, args.until, args.days, args.weekday):
        parser.error("There are no date pairs matching your criteria!")
    #Validation area -------------------------------------------

    provider = EurostarProvider(args.api_key)
    try:
        with warnings.catch_warnings():
            # risultato vuoto gestito qui sotto con un messaggio dedicato
            warnings.simplefilter("ignore", EmptyResultWarning)
            journeys = asyncio.run(_search(args, provider))
    except InvalidCriteriaError as exc:
        parser.error(str(exc))
    except ProviderError as exc:
        logger.error("Search failed: %s", exc)
        return 1

    if not journeys:
        print("No journey matches the given criteria :(")
        return 0

    logger.info("Found %d journeys matching criteria.", len(journeys))
    render_table(build_rows(journeys))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
