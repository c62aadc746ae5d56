"""
Base synthesizer: turns a scenario into an evaluation sample.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..exceptions import GenerationFailure
from ..models.llm_manager import LLMProvider
from ..scenario.models import Scenario
from .models import AnswerSchema, EvaluationSample, QuestionSchema

logger = logging.getLogger(__name__)

LENGTH_GUIDANCE = {
    "short": "a short question (few words)",
    "medium": "a medium-length question (1 sentence)",
    "long": "a longer, more detailed question (2-3 sentences)",
}

STYLE_GUIDANCE = {
    "web-search": "in a web search style (keyword-focused, direct)",
    "conversational": "in a conversational style (natural, as if asking a person)",
    "technical": "in a technical style (precise, domain-specific terminology)",
}

ANSWER_PROMPT = """Answer the following question based on the provided contexts. Be concise and accurate.

Question: {question}

Contexts:
{contexts}

Provide a clear, factual answer based only on the information in the contexts."""


def format_contexts(contexts: List[str]) -> str:
    return "\n\n".join(f"[{i + 1}] {context}" for i, context in enumerate(contexts))


class BaseSynthesizer(ABC):
    """
    Base class for all synthesizers.

    Subclasses build the question prompt; the base class extracts contexts,
    calls the model and assembles the sample.
    """

    def __init__(self, name: str, type: str, model: LLMProvider):
        self.name = name
        self.type = type
        self.model = model

    async def generate(self, scenario: Scenario, generate_ground_truth: bool = True) -> EvaluationSample:
        """
        Generate an evaluation sample from a scenario.

        Raises:
            GenerationFailure: The scenario has too few contexts or a model call failed
        """
        contexts = self.extract_contexts(scenario)
        question = await self.generate_question(scenario, contexts)
        reference = await self.generate_ground_truth(question, contexts) if generate_ground_truth else None

        return EvaluationSample(
            query=question,
            retrieved_contexts=contexts,
            response="",
            reference=reference,
            metadata={
                "persona": scenario.persona.name,
                "query_type": scenario.query.type,
                "query_length": scenario.query.length,
                "query_style": scenario.query.style,
                "synthesizer": self.name,
                "context_ids": [node.id for node in scenario.context.nodes if node.type == "chunk"],
            },
        )

    def extract_contexts(self, scenario: Scenario) -> List[str]:
        """Contents of the scenario's chunk nodes, in context order."""
        return [node.content for node in scenario.context.nodes if node.type == "chunk"]

    @abstractmethod
    def build_question_prompt(self, scenario: Scenario, contexts: List[str]) -> str:
        pass

    async def generate_question(self, scenario: Scenario, contexts: List[str]) -> str:
        prompt = self.build_question_prompt(scenario, contexts)
        try:
            result = await self.model.generate_object(prompt, QuestionSchema)
        except Exception as e:
            logger.error(f"{self.name} failed to generate question: {e}")
            raise GenerationFailure("Failed to generate question") from e
        return result.question

    async def generate_ground_truth(self, question: str, contexts: List[str]) -> str:
        prompt = ANSWER_PROMPT.format(question=question, contexts=format_contexts(contexts))
        try:
            result = await self.model.generate_object(prompt, AnswerSchema)
        except Exception as e:
            logger.error(f"{self.name} failed to generate ground truth: {e}")
            raise GenerationFailure("Failed to generate ground truth") from e
        return result.answer

    def get_length_guidance(self, length: str) -> str:
        return LENGTH_GUIDANCE[length]

    def get_style_guidance(self, style: str) -> str:
        return STYLE_GUIDANCE[style]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.type!r})"
