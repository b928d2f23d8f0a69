"""
EurostarProvider — unico provider reale (API BPA di Eurostar).

Una sola chiamata train-search restituisce sia l'andata (outbound-date) sia
il ritorno (inbound-date): per questo fetch_round_trip è sovrascritto e fa
una richiesta per coppia di date invece di due.

Ogni richiesta porta l'header x-apikey. In caso di HTTP 429 o 5xx la richiesta
viene ritentata con backoff esponenziale (1s, 2s, 4s…) fino a
provider_max_attempts tentativi; qualsiasi altro errore diventa ProviderError.

Prezzo di una corsa: tariffa adulto della prima classe restituita.
Le corse la cui prima classe non ha prezzo vengono scartate.
"""
import asyncio
import logging
from datetime import date, datetime

import httpx
from pydantic import TypeAdapter, ValidationError

from eurostarchecker.config import settings
from eurostarchecker.models.journey import Leg
from eurostarchecker.models.schemas import DirectionIn, StationIn, TrainSearchResponse
from eurostarchecker.services.providers.base import LegProvider, ProviderError

logger = logging.getLogger(__name__)

_SEARCH_LOCATION = "train-search/uk-en"
_STATIONS_LOCATION = "hotels-search/regions/uk-en"
_API_KEY_HEADER = "x-apikey"
_DATE_FORMAT = "%Y-%m-%d"

# Stazioni note senza interrogare l'API
STATION_TO_ID: dict[str, int] = {
    "London": 7015400,
    "Paris": 8727100,
}

_STATIONS_ADAPTER = TypeAdapter(dict[str, StationIn])


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def _legs_from_direction(direction: DirectionIn | None, day: date) -> list[Leg]:
    """Normalizza le corse di una direzione in Leg datati `day`."""
    if direction is None:
        return []

    legs: list[Leg] = []
    for journey in direction.journey:
        if not journey.classes or journey.classes[0].price is None:
            logger.debug("Nessun prezzo per la corsa %s del %s, scartata", journey.departure_time, day)
            continue
        legs.append(Leg(
            departure=datetime.combine(day, journey.departure_time),
            duration=journey.duration,
            price=journey.classes[0].price.adult,
        ))
    return legs


class EurostarProvider(LegProvider):

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url or settings.eurostar_base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.provider_max_attempts)
        # transport iniettabile: nei test si usa httpx.MockTransport
        self._transport = transport

    async def _get(self, location: str, params: dict[str, str]) -> httpx.Response:
        """GET con retry su 429/5xx. Restituisce solo risposte 2xx/3xx."""
        for attempt in range(self.max_attempts):
            logger.debug("GET %s/%s %s", self.base_url, location, params)
            try:
                async with httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=self.timeout,
                    transport=self._transport,
                ) as client:
                    resp = await client.get(
                        location,
                        params=params,
                        headers={_API_KEY_HEADER: self.api_key},
                    )
            except httpx.HTTPError as exc:
                raise ProviderError(f"Request to {location} failed: {exc}", cause=exc) from exc

            if _is_retryable(resp.status_code) and attempt < self.max_attempts - 1:
                wait = 2 ** attempt  # 1s, 2s, 4s
                logger.warning(
                    "Eurostar %s: HTTP %d (tentativo %d/%d), retry in %ds",
                    location, resp.status_code, attempt + 1, self.max_attempts, wait,
                )
                await asyncio.sleep(wait)
                continue
            break

        if resp.is_error:
            raise ProviderError(
                f"Got {resp.status_code} {resp.reason_phrase} response: {resp.text}",
                cause=resp.status_code,
            )
        logger.debug("Got %d response", resp.status_code)
        return resp

    async def _search(self, origin: int, destination: int, params: dict[str, str]) -> TrainSearchResponse:
        resp = await self._get(f"{_SEARCH_LOCATION}/{origin}/{destination}", params)
        try:
            return TrainSearchResponse.model_validate_json(resp.text)
        except ValidationError as exc:
            logger.debug("Invalid JSON: %s", resp.text)
            raise ProviderError(f"Error while parsing JSON: {exc}", cause=exc) from exc

    async def fetch_legs(
        self,
        origin: int,
        destination: int,
        day: date,
        adults: int = 1,
    ) -> list[Leg]:
        payload = await self._search(origin, destination, {
            "outbound-date": day.strftime(_DATE_FORMAT),
            "adult": str(adults),
        })
        if payload.outbound is None:
            logger.warning("Nessun treno trovato %s→%s per il %s", origin, destination, day)
        return _legs_from_direction(payload.outbound, day)

    async def fetch_round_trip(
        self,
        origin: int,
        destination: int,
        outbound_day: date,
        inbound_day: date,
        adults: int = 1,
    ) -> tuple[list[Leg], list[Leg]]:
        payload = await self._search(origin, destination, {
            "outbound-date": outbound_day.strftime(_DATE_FORMAT),
            "inbound-date": inbound_day.strftime(_DATE_FORMAT),
            "adult": str(adults),
        })
        if payload.outbound is None or payload.inbound is None:
            logger.warning("Nessun treno trovato per la coppia di date %s / %s", outbound_day, inbound_day)
        return (
            _legs_from_direction(payload.outbound, outbound_day),
            _legs_from_direction(payload.inbound, inbound_day),
        )

    async def fetch_stations(self) -> dict[str, int]:
        """Mappa nome stazione → stationId dall'endpoint regions."""
        resp = await self._get(_STATIONS_LOCATION, {})
        try:
            regions = _STATIONS_ADAPTER.validate_json(resp.text)
        except ValidationError as exc:
            logger.debug("Invalid JSON: %s", resp.text)
            raise ProviderError(f"Error while parsing JSON: {exc}", cause=exc) from exc

        stations = {station.region_name: station.station_id for station in regions.values()}
        if not stations:
            raise ProviderError("Server returned empty Station Name to Station ID")

        logger.debug("Mappa stazioni: %s", stations)
        return stations
