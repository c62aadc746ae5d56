"""
Synthesis orchestrator: distributes a sample count across synthesizers and
personas and runs generation with bounded concurrency.
"""

import logging
import math
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..dataset import EvaluationDataset
from ..exceptions import ConfigurationError, GenerationFailure
from ..graph.knowledge_graph import KnowledgeGraph
from ..persona.models import Persona
from ..scenario.builder import generate_scenarios
from ..utils import bounded_gather
from .base import BaseSynthesizer

logger = logging.getLogger(__name__)

WeightedSynthesizer = Tuple[BaseSynthesizer, float]

DEFAULT_CONFIG = {
    "concurrency": 5,
    "generate_ground_truth": True,
    "scenario": None,
}


def allocate_samples(synthesizers: Sequence[WeightedSynthesizer], count: int) -> List[int]:
    """
    Split ``count`` samples across synthesizers proportionally to their weights.

    Each share is rounded half-up; the signed difference between ``count``
    and the rounded total is added to the largest share (first one on ties),
    so the result always sums to ``count``.
    """
    if not synthesizers:
        raise ConfigurationError("At least one synthesizer must be provided")
    if count < 0:
        raise ConfigurationError("Sample count must not be negative")

    weights = [weight for _, weight in synthesizers]
    if any(weight < 0 for weight in weights):
        raise ConfigurationError("Synthesizer weights must not be negative")

    total_weight = sum(weights)
    if total_weight <= 0:
        raise ConfigurationError("Total weight of synthesizers must be greater than 0")

    allocations = [math.floor(count * weight / total_weight + 0.5) for weight in weights]

    difference = count - sum(allocations)
    if difference != 0:
        largest = max(range(len(allocations)), key=lambda i: allocations[i])
        allocations[largest] += difference

    return allocations


def split_across_personas(count: int, persona_count: int) -> List[int]:
    """Even split; the remainder goes one each to the first personas."""
    base, remainder = divmod(count, persona_count)
    return [base + (1 if i < remainder else 0) for i in range(persona_count)]


async def synthesize(
    graph: KnowledgeGraph,
    synthesizers: Sequence[WeightedSynthesizer],
    personas: Sequence[Persona],
    count: int,
    config: Optional[Dict[str, Any]] = None,
) -> EvaluationDataset:
    """
    Generate synthetic evaluation samples from a knowledge graph.

    Args:
        graph: Knowledge graph with chunk nodes
        synthesizers: (synthesizer, weight) pairs; weights are relative
        personas: Personas to spread the samples across
        count: Total number of samples to request
        config: Optional settings: concurrency (5), generate_ground_truth
            (True), scenario (scenario builder config)

    Returns:
        Dataset of generated samples; failed samples are logged and dropped

    Raises:
        ConfigurationError: Invalid synthesizers, personas, weights or count
        GenerationFailure: Every generation task failed
    """
    config = {**DEFAULT_CONFIG, **(config or {})}

    if not personas:
        raise ConfigurationError("At least one persona must be provided")
    allocations = allocate_samples(synthesizers, count)
    logger.info(
        "Sample allocation: "
        + ", ".join(f"{s.name}={n}" for (s, _), n in zip(synthesizers, allocations))
    )

    tasks = []
    for (synthesizer, _), allocation in zip(synthesizers, allocations):
        if allocation <= 0:
            continue

        for persona, persona_count in zip(personas, split_across_personas(allocation, len(personas))):
            if persona_count <= 0:
                continue

            scenarios = generate_scenarios(
                graph, persona, persona_count, synthesizer.type, config["scenario"]
            )
            if len(scenarios) < persona_count:
                logger.warning(
                    f"Only {len(scenarios)} of {persona_count} {synthesizer.type} "
                    f"scenarios available for persona '{persona.name}'"
                )
            tasks.extend((scenario, synthesizer) for scenario in scenarios)

    if not tasks:
        logger.warning("No scenarios to synthesize")
        return EvaluationDataset()

    async def run(task):
        scenario, synthesizer = task
        return await synthesizer.generate(scenario, config["generate_ground_truth"])

    start_time = time.time()
    results = await bounded_gather(tasks, run, config["concurrency"], return_exceptions=True)

    samples = []
    for (scenario, synthesizer), result in zip(tasks, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error(f"{synthesizer.name} failed for persona '{scenario.persona.name}': {result}")
            continue
        samples.append(result)

    if not samples:
        raise GenerationFailure(f"All {len(tasks)} sample generations failed")

    elapsed = time.time() - start_time
    logger.info(f"Generated {len(samples)}/{len(tasks)} samples in {elapsed:.2f}s")
    return EvaluationDataset(samples)
