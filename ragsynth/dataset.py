"""
Evaluation samples and the ordered collection they are returned in.
"""

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .exceptions import ConfigurationError, SerializationError
from .utils import shuffle

logger = logging.getLogger(__name__)


@dataclass
class EvaluationSample:
    """A synthesized question with its contexts and optional reference answer."""
    query: str
    retrieved_contexts: List[str]
    response: str = ""
    reference: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "query": self.query,
            "retrieved_contexts": list(self.retrieved_contexts),
            "response": self.response,
            "metadata": dict(self.metadata),
        }
        if self.reference is not None:
            data["reference"] = self.reference
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvaluationSample":
        try:
            return cls(
                query=data["query"],
                retrieved_contexts=list(data.get("retrieved_contexts", [])),
                response=data.get("response", ""),
                reference=data.get("reference"),
                metadata=dict(data.get("metadata", {})),
            )
        except (KeyError, TypeError) as e:
            raise SerializationError(f"Invalid evaluation sample: {e}") from e


class EvaluationDataset:
    """
    Ordered collection of evaluation samples.

    Transforming operations (map, filter, slice, shuffle, split, sample)
    return new datasets; add and add_many mutate in place and return self
    for chaining.
    """

    def __init__(self, samples: Optional[Iterable[EvaluationSample]] = None):
        self.samples: List[EvaluationSample] = list(samples or [])

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[EvaluationSample]:
        return iter(self.samples)

    def __repr__(self) -> str:
        return f"EvaluationDataset({len(self.samples)} samples)"

    def at(self, index: int) -> Optional[EvaluationSample]:
        """Sample at ``index`` (negative counts from the end), None when out of range."""
        if -len(self.samples) <= index < len(self.samples):
            return self.samples[index]
        return None

    def add(self, sample: EvaluationSample) -> "EvaluationDataset":
        self.samples.append(sample)
        return self

    def add_many(self, samples: Iterable[EvaluationSample]) -> "EvaluationDataset":
        self.samples.extend(samples)
        return self

    def map(self, fn: Callable[[EvaluationSample], EvaluationSample]) -> "EvaluationDataset":
        return EvaluationDataset(fn(sample) for sample in self.samples)

    def filter(self, predicate: Callable[[EvaluationSample], bool]) -> "EvaluationDataset":
        return EvaluationDataset(sample for sample in self.samples if predicate(sample))

    def slice(self, start: int, end: Optional[int] = None) -> "EvaluationDataset":
        return EvaluationDataset(self.samples[start:end])

    def shuffle(self, rng: Optional[random.Random] = None) -> "EvaluationDataset":
        return EvaluationDataset(shuffle(self.samples, rng))

    def split(self, ratio: float) -> Tuple["EvaluationDataset", "EvaluationDataset"]:
        """Split at ``floor(len * ratio)`` into a head and a tail dataset."""
        if not 0 <= ratio <= 1:
            raise ConfigurationError(f"Split ratio must be between 0 and 1, got {ratio}")
        index = int(len(self.samples) * ratio)
        return self.slice(0, index), self.slice(index)

    def sample(self, size: int, rng: Optional[random.Random] = None) -> "EvaluationDataset":
        """Random subset of at most ``size`` samples, without replacement."""
        if size < 0:
            raise ConfigurationError("Sample size must not be negative")
        return self.shuffle(rng).slice(0, size)

    def to_list(self) -> List[Dict[str, Any]]:
        return [sample.to_dict() for sample in self.samples]

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_list(), indent=indent, ensure_ascii=False)

    def to_jsonl(self) -> str:
        return "\n".join(json.dumps(item, ensure_ascii=False) for item in self.to_list())

    @classmethod
    def from_json(cls, text: str) -> "EvaluationDataset":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Invalid dataset JSON: {e}") from e
        if not isinstance(data, list):
            raise SerializationError("Dataset JSON must be a list of samples")
        return cls(EvaluationSample.from_dict(item) for item in data)

    @classmethod
    def from_jsonl(cls, text: str) -> "EvaluationDataset":
        samples = []
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                samples.append(EvaluationSample.from_dict(json.loads(line)))
            except json.JSONDecodeError as e:
                raise SerializationError(f"Invalid JSON on line {line_number}: {e}") from e
        return cls(samples)

    def save(self, filepath: Union[str, Path]):
        """Write the dataset as JSON Lines (``.jsonl``) or a JSON array (anything else)."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix == ".jsonl":
            content = self.to_jsonl()
        else:
            content = self.to_json(indent=2)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Saved {len(self.samples)} samples to {path}")

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "EvaluationDataset":
        path = Path(filepath)
        text = path.read_text(encoding="utf-8")
        if path.suffix == ".jsonl":
            return cls.from_jsonl(text)
        return cls.from_json(text)
