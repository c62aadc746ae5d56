"""
Structured output schemas for the synthesizer module.
"""

from pydantic import BaseModel, Field

from ..dataset import EvaluationSample


class QuestionSchema(BaseModel):
    question: str = Field(description="The generated question")


class AnswerSchema(BaseModel):
    answer: str = Field(description="The ground truth answer to the question")


__all__ = ["EvaluationSample", "QuestionSchema", "AnswerSchema"]
