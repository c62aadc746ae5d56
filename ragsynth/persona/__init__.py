"""
Persona generation.
"""

from .models import Persona, PersonaSchema, persona
from .generator import cluster_nodes, generate_personas, select_representatives

__all__ = [
    "Persona",
    "PersonaSchema",
    "persona",
    "generate_personas",
    "cluster_nodes",
    "select_representatives",
]
