from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, Hashable, Sequence, TypeVar

from core.logging import get_logger

logger = get_logger("core.batching")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


async def gather_in_batches(
    items: Sequence[K],
    worker: Callable[[K], Awaitable[V]],
    *,
    batch_size: int,
    delay: float,
    default: V,
    label: str = "batch",
) -> Dict[K, V]:
    """
    Esegue worker(item) in parallelo a gruppi di batch_size, con una pausa di
    `delay` secondi tra un gruppo e il successivo (mai dopo l'ultimo).

    Un fallimento del singolo item viene loggato e sostituito da `default`:
    non interrompe né il batch né i successivi. Il dict risultante segue
    l'ordine di input.
    """
    if batch_size < 1:
        raise ValueError("batch_size deve essere >= 1")
    unique = list(dict.fromkeys(items))
    results: Dict[K, V] = {}
    total_batches = (len(unique) + batch_size - 1) // batch_size
    for index in range(total_batches):
        chunk = unique[index * batch_size:(index + 1) * batch_size]
        outcomes = await asyncio.gather(*(worker(item) for item in chunk), return_exceptions=True)
        for item, outcome in zip(chunk, outcomes):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, Exception):
                logger.warning("%s: item=%r fallito (%s: %s)", label, item, outcome.__class__.__name__, outcome)
                results[item] = default
            else:
                results[item] = outcome
        if delay > 0 and index < total_batches - 1:
            await asyncio.sleep(delay)
    return results


__all__ = ["gather_in_batches"]
