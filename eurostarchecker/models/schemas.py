from datetime import datetime, time, timedelta
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


def _parse_hh_mm(value: str) -> datetime:
    return datetime.strptime(value, "%H:%M")


# ---------------------------------------------------------------------------
# Risposta train-search Eurostar
# ---------------------------------------------------------------------------

class FarePrice(BaseModel):
    adult: Decimal = Decimal("0")


class FareClass(BaseModel):
    price: FarePrice | None = None


class JourneyIn(BaseModel):
    departure_time: time = Field(alias="departureTime")
    duration: timedelta
    classes: list[FareClass] = Field(alias="class", default_factory=list)

    @field_validator("departure_time", mode="before")
    @classmethod
    def _departure_from_hh_mm(cls, value):
        if isinstance(value, str):
            return _parse_hh_mm(value).time()
        return value

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_from_hh_mm(cls, value):
        # Eurostar restituisce la durata come "02:17"
        if isinstance(value, str):
            parsed = _parse_hh_mm(value)
            return timedelta(hours=parsed.hour, minutes=parsed.minute)
        return value


class DirectionIn(BaseModel):
    journey: list[JourneyIn] = Field(default_factory=list)


class TrainSearchResponse(BaseModel):
    outbound: DirectionIn | None = None
    inbound: DirectionIn | None = None


# ---------------------------------------------------------------------------
# Risposta hotels-search/regions (mappa nome stazione → id)
# ---------------------------------------------------------------------------

class StationIn(BaseModel):
    region_name: str = Field(alias="regionName")
    station_id: int = Field(alias="stationId")


# ---------------------------------------------------------------------------
# Riga pronta per la visualizzazione (una per JourneyPair)
# ---------------------------------------------------------------------------

class JourneyRowOut(BaseModel):
    outbound: str    # "2020-06-19 18:01 (2h17m)"
    inbound: str
    price: Decimal
