"""
Persona generation from a summarized, embedded knowledge graph.
"""

import logging
import random
from typing import List, Optional

from ..exceptions import ConfigurationError, GenerationFailure
from ..graph.knowledge_graph import KnowledgeGraph
from ..graph.models import GraphNode
from ..models.llm_manager import LLMProvider
from ..utils import bounded_gather, cosine_similarity
from .models import Persona, PersonaSchema

logger = logging.getLogger(__name__)

EXPERTISE_LEVELS = ("beginner", "intermediate", "expert")

PERSONA_PROMPT = """Using the provided summary, generate a single persona who would likely interact with or benefit from the content with the given expertise level.

Expertise level:
{expertise}

Summary:
{summary}

Generate a persona with:
- A role or job title (e.g., "Senior Software Engineer", "Product Manager", "Data Scientist") - do NOT include a human name
- A concise description of who they are, their background, knowledge level and goals

Provide a realistic and specific persona based on this content with the given expertise level."""


def cluster_nodes(
    nodes: List[GraphNode],
    similarity_threshold: float = 0.75,
    embedding_property: str = "summary_embedding",
) -> List[List[GraphNode]]:
    """
    Greedy single-pass clustering of nodes by embedding similarity.

    Nodes are visited in the given order; each joins the first cluster whose
    first member is at least ``similarity_threshold`` similar to it, or
    starts a new cluster.
    """
    clusters: List[List[GraphNode]] = []

    for node in nodes:
        embedding = node.metadata[embedding_property]
        for cluster in clusters:
            if cosine_similarity(embedding, cluster[0].metadata[embedding_property]) >= similarity_threshold:
                cluster.append(node)
                break
        else:
            clusters.append([node])

    return clusters


def select_representatives(
    clusters: List[List[GraphNode]],
    summary_property: str = "summary",
) -> List[GraphNode]:
    """Pick the member with the longest summary from each cluster."""
    return [
        max(cluster, key=lambda node: len(node.metadata[summary_property]))
        for cluster in clusters
    ]


async def generate_personas(
    graph: KnowledgeGraph,
    model: LLMProvider,
    count: Optional[int] = None,
    concurrency: int = 5,
    similarity_threshold: float = 0.75,
    summary_property: str = "summary",
    embedding_property: str = "summary_embedding",
    rng: Optional[random.Random] = None,
) -> List[Persona]:
    """
    Generate diverse personas from a knowledge graph.

    Args:
        graph: Graph whose nodes carry a summary and its embedding
        model: Text generation model
        count: Number of personas; one per cluster when omitted. Cluster
            representatives are reused cyclically when count exceeds them
        concurrency: Maximum number of in-flight model calls
        similarity_threshold: Cosine similarity needed to join a cluster
        summary_property: Metadata key of the summary text
        embedding_property: Metadata key of the summary embedding
        rng: Randomness source for expertise levels

    Returns:
        Generated personas; failed generations are dropped

    Raises:
        ConfigurationError: No node has both a summary and its embedding, or count <= 0
        GenerationFailure: Every persona generation failed
    """
    if count is not None and count <= 0:
        raise ConfigurationError("Persona count must be greater than 0")

    rng = rng or random.Random()

    def is_eligible(node: GraphNode) -> bool:
        summary = node.metadata.get(summary_property)
        embedding = node.metadata.get(embedding_property)
        return isinstance(summary, str) and bool(summary.strip()) and bool(embedding)

    nodes = graph.get_nodes_by(is_eligible)
    if not nodes:
        raise ConfigurationError(
            "No nodes with summary embeddings found. Run the summarize() and "
            "embed_property() transforms before generating personas."
        )

    clusters = cluster_nodes(nodes, similarity_threshold, embedding_property)
    representatives = select_representatives(clusters, summary_property)
    logger.info(f"Clustered {len(nodes)} summaries into {len(clusters)} clusters")

    if count is not None:
        representatives = [representatives[i % len(representatives)] for i in range(count)]

    # drawn up front so results do not depend on task scheduling
    requests = [
        (node.metadata[summary_property], rng.choice(EXPERTISE_LEVELS))
        for node in representatives
    ]

    async def generate_one(request) -> Optional[Persona]:
        summary, expertise = request
        try:
            result = await model.generate_object(
                PERSONA_PROMPT.format(expertise=expertise, summary=summary),
                PersonaSchema,
            )
            return Persona(name=result.name, description=result.description)
        except Exception as e:
            logger.error(f"Failed to generate persona: {e}")
            return None

    results = await bounded_gather(requests, generate_one, concurrency)
    personas = [p for p in results if p is not None]

    if not personas:
        raise GenerationFailure("Failed to generate any personas")

    if len(personas) < len(requests):
        logger.warning(f"Generated {len(personas)} of {len(requests)} requested personas")
    else:
        logger.info(f"Generated {len(personas)} personas")
    return personas
