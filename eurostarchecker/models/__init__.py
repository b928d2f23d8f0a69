# Punto unico di import per le entità del dominio e gli schemi pydantic.
from eurostarchecker.models.journey import JourneyPair, Leg, SearchCriteria, SortBy, TimeWindow  # noqa: F401
from eurostarchecker.models.schemas import JourneyRowOut, TrainSearchResponse  # noqa: F401
