"""
Journey Engine — ricerca di viaggi andata/ritorno.

Pipeline in 5 step:
  Step 1: validazione dei criteri     → InvalidCriteriaError prima di qualsiasi fetch
  Step 2: enumerazione date candidate → (andata, andata + trip_length_days)
  Step 3: fetch delle corse per data  → chiamate parallele asincrone (semaforo)
  Step 4: prodotto cartesiano + filtri (finestre orarie, prezzo massimo)
  Step 5: ordinamento deterministico per prezzo o per data

Gli step 2, 4 e 5 sono funzioni pure, testabili senza provider.
Nessun retry e nessun risultato parziale: se il fetch di una data fallisce,
l'intera ricerca fallisce con ProviderError.
"""
import asyncio
import logging
import warnings
from collections.abc import Iterable
from datetime import date

from eurostarchecker.config import settings
from eurostarchecker.models.journey import JourneyPair, Leg, SearchCriteria, SortBy
from eurostarchecker.services.providers.base import LegProvider, ProviderError
from eurostarchecker.utils.dates import travel_dates
from eurostarchecker.utils.tasks import gather_or_cancel

logger = logging.getLogger(__name__)


class InvalidCriteriaError(ValueError):
    """Criteri di ricerca malformati (es. since > until, trip_length_days < 1)."""


class EmptyResultWarning(UserWarning):
    """Nessuna combinazione sopravvive ai filtri: esito valido, lista vuota."""


# ---------------------------------------------------------------------------
# Step 1 — validazione
# ---------------------------------------------------------------------------

def validate_criteria(criteria: SearchCriteria) -> None:
    if criteria.origin == criteria.destination:
        raise InvalidCriteriaError("Start and finish stations need to be different!")
    if criteria.since > criteria.until:
        raise InvalidCriteriaError(f"since ({criteria.since}) must not be after until ({criteria.until})")
    if criteria.trip_length_days < 1:
        raise InvalidCriteriaError(f"trip length must be at least 1 day, got {criteria.trip_length_days}")
    if criteria.adults < 1:
        raise InvalidCriteriaError(f"at least 1 adult is required, got {criteria.adults}")
    if criteria.max_price is not None and criteria.max_price < 0:
        raise InvalidCriteriaError(f"max price must not be negative, got {criteria.max_price}")


# ---------------------------------------------------------------------------
# Step 4 — coppie e filtri
# ---------------------------------------------------------------------------

def make_pairs(outbound_legs: Iterable[Leg], inbound_legs: Iterable[Leg]) -> list[JourneyPair]:
    """Prodotto cartesiano completo andata × ritorno, senza deduplicazione."""
    inbound_legs = list(inbound_legs)
    return [
        JourneyPair(outbound=outbound, inbound=inbound)
        for outbound in outbound_legs
        for inbound in inbound_legs
    ]


def passes_filters(pair: JourneyPair, criteria: SearchCriteria) -> bool:
    if not criteria.outbound_window.contains(pair.outbound.departure):
        return False
    if not criteria.inbound_window.contains(pair.inbound.departure):
        return False
    if criteria.max_price is not None and pair.combined_price > criteria.max_price:
        return False
    return True


def filter_pairs(pairs: Iterable[JourneyPair], criteria: SearchCriteria) -> list[JourneyPair]:
    return [pair for pair in pairs if passes_filters(pair, criteria)]


# ---------------------------------------------------------------------------
# Step 5 — ordinamento
# ---------------------------------------------------------------------------

def _price_key(pair: JourneyPair):
    return (pair.combined_price, pair.outbound.departure, pair.inbound.departure)


def _date_key(pair: JourneyPair):
    return (pair.outbound.departure, pair.inbound.departure, pair.combined_price)


def rank_pairs(pairs: Iterable[JourneyPair], sort_by: SortBy) -> list[JourneyPair]:
    key = _price_key if sort_by == SortBy.PRICE else _date_key
    return sorted(pairs, key=key)


# ---------------------------------------------------------------------------
# Step 3 helper — fetch di una singola coppia di date
# ---------------------------------------------------------------------------

async def _fetch_day(
    provider: LegProvider,
    criteria: SearchCriteria,
    outbound_day: date,
    inbound_day: date,
    semaphore: asyncio.Semaphore,
) -> tuple[list[Leg], list[Leg]]:
    async with semaphore:
        try:
            return await provider.fetch_round_trip(
                criteria.origin, criteria.destination, outbound_day, inbound_day, criteria.adults,
            )
        except ProviderError as exc:
            raise ProviderError(exc.args[0], day=outbound_day, cause=exc.cause) from exc
        except Exception as exc:
            raise ProviderError(f"{type(exc).__name__}: {exc}", day=outbound_day, cause=exc) from exc


# ---------------------------------------------------------------------------
# Entry point pubblico
# ---------------------------------------------------------------------------

async def find_journeys(
    criteria: SearchCriteria,
    provider: LegProvider,
    max_concurrency: int | None = None,
) -> list[JourneyPair]:
    """
    Esegue l'intera pipeline e restituisce le coppie ordinate secondo criteria.sort_by.

    Raises:
        InvalidCriteriaError — criteri malformati, nessun fetch effettuato
        ProviderError        — fetch fallito per una data (day = data di andata)
    """
    # --- 1. Validazione
    validate_criteria(criteria)

    # --- 2. Date candidate
    travels = travel_dates(criteria.since, criteria.until, criteria.trip_length_days, criteria.weekdays)
    logger.debug("Possibili date di viaggio: %s", travels)

    # --- 3. Fetch parallelo: risultati nell'ordine delle date, al primo errore
    # i fetch ancora in corso vengono cancellati
    semaphore = asyncio.Semaphore(max_concurrency or settings.max_concurrent_fetches)
    legs_per_day = await gather_or_cancel(*[
        _fetch_day(provider, criteria, outbound_day, inbound_day, semaphore)
        for outbound_day, inbound_day in travels
    ])

    # --- 4. Coppie + filtri
    journeys: list[JourneyPair] = []
    for outbound_legs, inbound_legs in legs_per_day:
        journeys.extend(filter_pairs(make_pairs(outbound_legs, inbound_legs), criteria))

    # --- 5. Ordinamento
    ranked = rank_pairs(journeys, criteria.sort_by)

    if not ranked:
        warnings.warn(EmptyResultWarning("No journey matches the given criteria"), stacklevel=2)
    else:
        logger.info("Trovati %d viaggi su %d date candidate", len(ranked), len(travels))
    return ranked
