"""
Shared helpers: bounded concurrency, shuffling and vector similarity.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    items: Sequence[T],
    fn: Callable[[T], Awaitable[R]],
    concurrency: int = 5,
    return_exceptions: bool = False,
) -> List[Any]:
    """
    Run ``fn`` over ``items`` with at most ``concurrency`` calls in flight.

    Args:
        items: Inputs, one coroutine is created per item
        fn: Async callable applied to each item
        concurrency: Maximum number of simultaneously running calls
        return_exceptions: Return raised exceptions in place of results
            instead of propagating the first one

    Returns:
        Results in submission order, not completion order
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    semaphore = asyncio.Semaphore(concurrency)

    async def run(item: T) -> R:
        async with semaphore:
            return await fn(item)

    return await asyncio.gather(
        *[run(item) for item in items], return_exceptions=return_exceptions
    )


def shuffle(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of ``items``; the input is left untouched."""
    result = list(items)
    (rng or random).shuffle(result)
    return result


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors, 0.0 when either has zero norm."""
    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)
    if vec_a.shape != vec_b.shape:
        raise ValueError(
            f"Vectors must have the same length: {vec_a.shape[0]} != {vec_b.shape[0]}"
        )

    norm = np.linalg.norm(vec_a) * np.linalg.norm(vec_b)
    if norm == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / norm)


def cosine_similarity_matrix(vectors: Sequence[Sequence[float]]) -> np.ndarray:
    """Pairwise cosine similarities of a list of equal-length vectors."""
    matrix = np.asarray(vectors, dtype=float)
    if matrix.ndim != 2:
        raise ValueError("All vectors must have the same length")

    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    # zero vectors stay zero and therefore score 0.0 against everything
    norms[norms == 0] = 1.0
    normalized = matrix / norms
    return normalized @ normalized.T
