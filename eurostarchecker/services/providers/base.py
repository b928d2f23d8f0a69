"""
Leg Provider Layer — interfaccia astratta (Strategy Pattern).

Il motore (journey_engine) usa solo queste classi; il provider concreto
(oggi solo Eurostar) viene costruito dalla CLI.
"""
from abc import ABC, abstractmethod
from datetime import date

from eurostarchecker.models.journey import Leg
from eurostarchecker.utils.tasks import gather_or_cancel


class ProviderError(Exception):
    """
    Errore del provider (rete, autenticazione, risposta malformata).

    day   — data di andata candidata per cui la ricerca è fallita (se nota)
    cause — eccezione o messaggio all'origine dell'errore
    """

    def __init__(self, message: str, day: date | None = None, cause: object = None) -> None:
        super().__init__(message)
        self.day = day
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.day is not None:
            return f"{message} (date: {self.day.isoformat()})"
        return message


class LegProvider(ABC):

    @abstractmethod
    async def fetch_legs(
        self,
        origin: int,
        destination: int,
        day: date,
        adults: int = 1,
    ) -> list[Leg]:
        """
        Corse da origin a destination in partenza il giorno `day`.
        Lista vuota (non errore) se quel giorno non ci sono corse.
        """
        ...

    async def fetch_round_trip(
        self,
        origin: int,
        destination: int,
        outbound_day: date,
        inbound_day: date,
        adults: int = 1,
    ) -> tuple[list[Leg], list[Leg]]:
        """
        Andata origin→destination il giorno outbound_day e ritorno
        destination→origin il giorno inbound_day.

        Di default due fetch_legs in parallelo; i provider che restituiscono
        entrambe le direzioni in una sola chiamata lo sovrascrivono.
        """
        outbound, inbound = await gather_or_cancel(
            self.fetch_legs(origin, destination, outbound_day, adults),
            self.fetch_legs(destination, origin, inbound_day, adults),
        )
        return outbound, inbound
