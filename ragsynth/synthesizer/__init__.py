"""
Question/answer synthesis.
"""

from .models import AnswerSchema, EvaluationSample, QuestionSchema
from .base import BaseSynthesizer
from .implementations import (
    MultiHopAbstractQuerySynthesizer,
    MultiHopSpecificQuerySynthesizer,
    SingleHopSpecificQuerySynthesizer,
    create_synthesizer,
)
from .orchestrator import allocate_samples, synthesize

__all__ = [
    "EvaluationSample",
    "QuestionSchema",
    "AnswerSchema",
    "BaseSynthesizer",
    "SingleHopSpecificQuerySynthesizer",
    "MultiHopAbstractQuerySynthesizer",
    "MultiHopSpecificQuerySynthesizer",
    "create_synthesizer",
    "allocate_samples",
    "synthesize",
]
