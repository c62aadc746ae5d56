"""
Data models for the persona module.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class Persona:
    """A role that synthesized questions are written for."""
    name: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Persona":
        return cls(name=data["name"], description=data["description"])


class PersonaSchema(BaseModel):
    """Structured output requested from the model for one persona."""
    name: str = Field(
        description='The role or title of the persona (e.g., "Senior Software Engineer", "Product Manager")'
    )
    description: str = Field(
        description="A detailed description of the persona including their background, knowledge level, goals"
    )


def persona(name: str, description: str) -> Persona:
    """Create a persona by hand instead of generating it."""
    return Persona(name=name, description=description)
