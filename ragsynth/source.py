"""
Test-data source that wraps the synthesis pipeline behind a single object.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .dataset import EvaluationDataset
from .exceptions import ConfigurationError
from .graph.knowledge_graph import KnowledgeGraph
from .models.llm_manager import LLMProvider
from .persona.generator import generate_personas
from .persona.models import Persona
from .synthesizer.base import BaseSynthesizer
from .synthesizer.implementations import create_synthesizer
from .synthesizer.orchestrator import synthesize

logger = logging.getLogger(__name__)

PERSONA_TOKENS = 1000
QUESTION_TOKENS = 500
GROUND_TRUTH_TOKENS = 300


class SDGSource:
    """
    Synthetic data generation source backed by a knowledge graph and an LLM.

    Personas are generated on the first call to ``generate`` unless supplied,
    and reused for every later call.

    Example:
        source = SDGSource(kg, llm, synthesizers=[("single-hop-specific", 30), ("multi-hop-abstract", 20)])
        source.validate(50)
        dataset = await source.generate(50)
    """

    description = "Synthetic Data Generation using Knowledge Graphs and LLMs"

    def __init__(
        self,
        knowledge_graph: KnowledgeGraph,
        llm: LLMProvider,
        synthesizers: Optional[Sequence[Tuple[str, float]]] = None,
        personas: Optional[List[Persona]] = None,
        persona_count: int = 5,
        generate_ground_truth: bool = True,
        name: str = "sdg",
        custom_synthesizers: Optional[Sequence[Tuple[BaseSynthesizer, float]]] = None,
        concurrency: int = 5,
    ):
        self.knowledge_graph = knowledge_graph
        self.llm = llm
        self.synthesizer_specs = list(synthesizers or [])
        self.custom_synthesizers = list(custom_synthesizers or [])
        self.persona_count = persona_count
        self.generate_ground_truth = generate_ground_truth
        self.name = name
        self.concurrency = concurrency
        self.personas: Optional[List[Persona]] = list(personas) if personas else None

    def build_synthesizers(self) -> List[Tuple[BaseSynthesizer, float]]:
        synthesizers = list(self.custom_synthesizers)
        for kind, weight in self.synthesizer_specs:
            synthesizers.append((create_synthesizer(self.llm, kind), weight))

        if not synthesizers:
            synthesizers.append((create_synthesizer(self.llm, "single-hop-specific"), 100))
        return synthesizers

    async def get_personas(self) -> List[Persona]:
        if self.personas is None:
            logger.info(f"Generating {self.persona_count} personas for source '{self.name}'")
            self.personas = await generate_personas(
                self.knowledge_graph, self.llm, count=self.persona_count, concurrency=self.concurrency
            )
        return self.personas

    async def generate(self, count: int) -> EvaluationDataset:
        """Generate ``count`` samples."""
        personas = await self.get_personas()
        return await synthesize(
            self.knowledge_graph,
            self.build_synthesizers(),
            personas,
            count,
            {"generate_ground_truth": self.generate_ground_truth, "concurrency": self.concurrency},
        )

    def validate(self, count: int):
        if count <= 0:
            raise ConfigurationError("Count must be greater than 0")
        if len(self.knowledge_graph) == 0:
            raise ConfigurationError("Knowledge graph is empty")

    def estimate_cost(self, count: int) -> int:
        """Rough token estimate for generating ``count`` samples."""
        total_tokens = 0
        if self.personas is None:
            total_tokens += self.persona_count * PERSONA_TOKENS
        total_tokens += count * QUESTION_TOKENS
        if self.generate_ground_truth:
            total_tokens += count * GROUND_TRUTH_TOKENS
        return total_tokens


def quick_sdg_source(
    knowledge_graph: KnowledgeGraph,
    llm: LLMProvider,
    persona_count: int = 3,
    generate_ground_truth: bool = True,
    name: str = "sdg",
) -> SDGSource:
    """Source that only asks single-hop specific questions."""
    return SDGSource(
        knowledge_graph,
        llm,
        synthesizers=[("single-hop-specific", 100)],
        persona_count=persona_count,
        generate_ground_truth=generate_ground_truth,
        name=name,
    )


def diverse_sdg_source(
    knowledge_graph: KnowledgeGraph,
    llm: LLMProvider,
    single_hop: float = 0,
    multi_hop_abstract: float = 0,
    multi_hop_specific: float = 0,
    persona_count: int = 5,
    generate_ground_truth: bool = True,
    name: str = "diverse-sdg",
) -> SDGSource:
    """Source mixing synthesizer types; types with a zero weight are left out."""
    distribution = [
        ("single-hop-specific", single_hop),
        ("multi-hop-abstract", multi_hop_abstract),
        ("multi-hop-specific", multi_hop_specific),
    ]
    return SDGSource(
        knowledge_graph,
        llm,
        synthesizers=[(kind, weight) for kind, weight in distribution if weight],
        persona_count=persona_count,
        generate_ground_truth=generate_ground_truth,
        name=name,
    )
