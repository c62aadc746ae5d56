"""
Concrete synthesizers and the synthesizer factory.
"""

from typing import List

from ..exceptions import ConfigurationError, GenerationFailure
from ..models.llm_manager import LLMProvider
from ..scenario.models import Scenario
from .base import BaseSynthesizer, format_contexts

SINGLE_HOP_SPECIFIC_PROMPT = """You are generating a test question for a RAG (Retrieval Augmented Generation) evaluation.

Persona: {persona_name}
Persona Description: {persona_description}

Generate {length_guidance} {style_guidance}.

The question should:
- Be specific and detailed
- Be answerable using ONLY the information in the context below
- Be relevant to the persona's interests and knowledge level
- Focus on specific facts, details, or concepts mentioned in the context

Context:
{context}

Generate a single, clear question that this persona would ask."""

MULTI_HOP_ABSTRACT_PROMPT = """You are generating a test question for a RAG (Retrieval Augmented Generation) evaluation.

Persona: {persona_name}
Description: {persona_description}

Generate {length_guidance} {style_guidance}.

The question should:
- Be abstract and conceptual
- Require synthesizing information from multiple contexts
- Ask about high-level patterns, themes, or relationships
- Be relevant to the persona's interests and knowledge level
- NOT reference specific details from any single context

Contexts:
{contexts}

Generate a single, clear question that requires understanding information across all contexts."""

MULTI_HOP_SPECIFIC_PROMPT = """You are generating a test question for a RAG (Retrieval Augmented Generation) evaluation.

Persona: {persona_name}
Description: {persona_description}

Generate {length_guidance} {style_guidance}.

The question should:
- Be specific and detailed
- Require connecting specific facts or details from multiple contexts
- Ask about relationships or comparisons between specific elements
- Be relevant to the persona's interests and knowledge level
- Reference or imply specific details that appear across different contexts

Contexts:
{contexts}

Generate a single, clear question that requires information from multiple contexts to answer."""


class SingleHopSpecificQuerySynthesizer(BaseSynthesizer):
    """Specific questions answerable from a single context."""

    def __init__(self, model: LLMProvider):
        super().__init__("SingleHopSpecificQuerySynthesizer", "single-hop", model)

    def build_question_prompt(self, scenario: Scenario, contexts: List[str]) -> str:
        if not contexts:
            raise GenerationFailure(f"{self.name} requires at least one context")

        return SINGLE_HOP_SPECIFIC_PROMPT.format(
            persona_name=scenario.persona.name,
            persona_description=scenario.persona.description,
            length_guidance=self.get_length_guidance(scenario.query.length),
            style_guidance=self.get_style_guidance(scenario.query.style),
            context=contexts[0],
        )


class MultiHopSynthesizer(BaseSynthesizer):
    """Shared prompt assembly for synthesizers that need several contexts."""

    prompt_template = ""

    def build_question_prompt(self, scenario: Scenario, contexts: List[str]) -> str:
        if len(contexts) < 2:
            raise GenerationFailure(f"{self.name} requires at least two contexts")

        return self.prompt_template.format(
            persona_name=scenario.persona.name,
            persona_description=scenario.persona.description,
            length_guidance=self.get_length_guidance(scenario.query.length),
            style_guidance=self.get_style_guidance(scenario.query.style),
            contexts=format_contexts(contexts),
        )


class MultiHopAbstractQuerySynthesizer(MultiHopSynthesizer):
    """Conceptual questions that synthesize themes across contexts."""

    prompt_template = MULTI_HOP_ABSTRACT_PROMPT

    def __init__(self, model: LLMProvider):
        super().__init__("MultiHopAbstractQuerySynthesizer", "multi-hop", model)


class MultiHopSpecificQuerySynthesizer(MultiHopSynthesizer):
    """Specific questions connecting facts from several contexts."""

    prompt_template = MULTI_HOP_SPECIFIC_PROMPT

    def __init__(self, model: LLMProvider):
        super().__init__("MultiHopSpecificQuerySynthesizer", "multi-hop", model)


SYNTHESIZER_CLASSES = {
    "single-hop-specific": SingleHopSpecificQuerySynthesizer,
    "multi-hop-abstract": MultiHopAbstractQuerySynthesizer,
    "multi-hop-specific": MultiHopSpecificQuerySynthesizer,
}


def create_synthesizer(model: LLMProvider, kind: str) -> BaseSynthesizer:
    """
    Create a synthesizer by name.

    Args:
        model: Text generation model
        kind: "single-hop-specific", "multi-hop-abstract" or "multi-hop-specific"
    """
    if kind not in SYNTHESIZER_CLASSES:
        raise ConfigurationError(f"Invalid synthesizer type: {kind}")
    return SYNTHESIZER_CLASSES[kind](model)
