"""
Exception hierarchy for the ragsynth package.
"""


class RagSynthError(Exception):
    """Base class for all ragsynth errors."""


class StructuralError(RagSynthError):
    """A graph operation referenced a node or edge that does not exist."""


class NotFoundError(StructuralError, KeyError):
    """A node id was not found in the knowledge graph."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ""


class SerializationError(RagSynthError, ValueError):
    """Serialized graph data is malformed or uses an unknown discriminator."""


class GenerationFailure(RagSynthError):
    """An injected model call failed or returned malformed output."""


class ConfigurationError(RagSynthError, ValueError):
    """Invalid input or configuration, raised before any model call is issued."""
