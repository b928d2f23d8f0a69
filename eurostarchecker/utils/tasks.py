import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """
    Come asyncio.gather (risultati nell'ordine degli argomenti), ma al primo
    errore cancella i task ancora in corso e attende che terminino prima di
    rilanciare l'eccezione: nessuna richiesta resta in volo dopo un fallimento.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
