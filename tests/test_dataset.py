"""
Tests for the evaluation dataset and the SDG source.
"""

import random
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from ragsynth.dataset import EvaluationDataset, EvaluationSample
from ragsynth.exceptions import ConfigurationError, SerializationError
from ragsynth.graph import ChunkNode, graph
from ragsynth.persona import PersonaSchema, persona
from ragsynth.source import SDGSource, diverse_sdg_source, quick_sdg_source
from ragsynth.synthesizer import AnswerSchema, QuestionSchema


def make_samples(count):
    return [
        EvaluationSample(
            query=f"Question {i}?",
            retrieved_contexts=[f"context {i}"],
            reference=f"Answer {i}" if i % 2 == 0 else None,
            metadata={"persona": "Analyst", "index": i},
        )
        for i in range(count)
    ]


class TestEvaluationDataset:
    """Test dataset operations."""

    @pytest.fixture
    def dataset(self):
        return EvaluationDataset(make_samples(10))

    def test_len_iter_at(self, dataset):
        assert len(dataset) == 10
        assert [s.metadata["index"] for s in dataset] == list(range(10))
        assert dataset.at(0).query == "Question 0?"
        assert dataset.at(-1).query == "Question 9?"
        assert dataset.at(10) is None

    def test_add_and_add_many_chain(self):
        samples = make_samples(3)
        dataset = EvaluationDataset().add(samples[0]).add_many(samples[1:])
        assert len(dataset) == 3

    def test_map_filter_slice_return_new_datasets(self, dataset):
        upper = dataset.map(lambda s: EvaluationSample(query=s.query.upper(), retrieved_contexts=s.retrieved_contexts))
        with_reference = dataset.filter(lambda s: s.reference is not None)
        head = dataset.slice(0, 3)

        assert upper.at(0).query == "QUESTION 0?"
        assert len(with_reference) == 5
        assert [s.metadata["index"] for s in head] == [0, 1, 2]
        assert len(dataset) == 10

    def test_shuffle_keeps_samples(self, dataset):
        shuffled = dataset.shuffle(random.Random(3))
        assert sorted(s.metadata["index"] for s in shuffled) == list(range(10))
        assert [s.metadata["index"] for s in dataset] == list(range(10))

    def test_split(self, dataset):
        train, test = dataset.split(0.75)
        assert (len(train), len(test)) == (7, 3)
        assert train.at(0).query == "Question 0?"
        assert test.at(0).query == "Question 7?"

    def test_split_rejects_bad_ratio(self, dataset):
        with pytest.raises(ConfigurationError):
            dataset.split(1.5)

    def test_sample(self, dataset):
        subset = dataset.sample(4, random.Random(1))
        indexes = [s.metadata["index"] for s in subset]
        assert len(indexes) == 4
        assert len(set(indexes)) == 4
        assert len(dataset.sample(50)) == 10

    def test_json_round_trip(self, dataset):
        restored = EvaluationDataset.from_json(dataset.to_json())
        assert restored.to_list() == dataset.to_list()

    def test_jsonl_round_trip(self, dataset):
        text = dataset.to_jsonl()
        assert len(text.splitlines()) == 10
        assert EvaluationDataset.from_jsonl(text).to_list() == dataset.to_list()

    def test_missing_reference_is_omitted(self, dataset):
        assert "reference" in dataset.at(0).to_dict()
        assert "reference" not in dataset.at(1).to_dict()

    def test_invalid_json(self):
        with pytest.raises(SerializationError):
            EvaluationDataset.from_json('{"query": "not a list"}')
        with pytest.raises(SerializationError):
            EvaluationDataset.from_jsonl('{"retrieved_contexts": []}')

    @pytest.mark.parametrize("file_name", ["samples.jsonl", "samples.json"])
    def test_save_and_load(self, dataset, tmp_path, file_name):
        path = tmp_path / "out" / file_name
        dataset.save(path)
        assert EvaluationDataset.load(path).to_list() == dataset.to_list()


class TestSDGSource:
    """Test the SDG source wrapper."""

    @pytest.fixture
    def kg(self):
        return graph([
            ChunkNode(
                id=f"c{i}",
                content=f"Chunk about topic {i}",
                metadata={"summary": f"Summary of topic {i}", "summary_embedding": [1.0, float(i)]},
            )
            for i in range(3)
        ])

    @pytest.fixture
    def llm(self):
        async def fake_generate_object(prompt, schema, **kwargs):
            if schema is PersonaSchema:
                return PersonaSchema(name="Research Scientist", description="Studies the topics")
            if schema is QuestionSchema:
                return QuestionSchema(question="What is the topic?")
            return AnswerSchema(answer="The topic.")

        model = Mock()
        model.generate_object = AsyncMock(side_effect=fake_generate_object)
        return model

    @pytest.mark.asyncio
    async def test_generate_caches_personas(self, kg, llm):
        source = SDGSource(kg, llm, persona_count=2)

        first = await source.generate(3)
        persona_calls = [
            call for call in llm.generate_object.await_args_list if call.args[1] is PersonaSchema
        ]
        second = await source.generate(2)
        persona_calls_after = [
            call for call in llm.generate_object.await_args_list if call.args[1] is PersonaSchema
        ]

        assert len(first) == 3
        assert len(second) == 2
        assert len(persona_calls) == 2
        assert len(persona_calls_after) == 2
        assert all(s.metadata["synthesizer"] == "SingleHopSpecificQuerySynthesizer" for s in first)

    @pytest.mark.asyncio
    async def test_supplied_personas_skip_generation(self, kg, llm):
        source = SDGSource(kg, llm, personas=[persona("Pilot", "Flies things")], generate_ground_truth=False)

        dataset = await source.generate(2)

        assert all(s.metadata["persona"] == "Pilot" for s in dataset)
        assert all(s.reference is None for s in dataset)

    def test_validate(self, kg, llm):
        SDGSource(kg, llm).validate(5)
        with pytest.raises(ConfigurationError):
            SDGSource(kg, llm).validate(0)
        with pytest.raises(ConfigurationError):
            SDGSource(graph(), llm).validate(5)

    def test_estimate_cost(self, kg, llm):
        assert SDGSource(kg, llm, persona_count=2).estimate_cost(10) == 2 * 1000 + 10 * 500 + 10 * 300
        with_personas = SDGSource(kg, llm, personas=[persona("Pilot", "Flies things")], generate_ground_truth=False)
        assert with_personas.estimate_cost(10) == 10 * 500

    def test_synthesizer_configuration(self, kg, llm):
        custom = Mock(type="single-hop")
        source = SDGSource(kg, llm, synthesizers=[("multi-hop-abstract", 20)], custom_synthesizers=[(custom, 5)])

        synthesizers = source.build_synthesizers()

        assert synthesizers[0] == (custom, 5)
        assert synthesizers[1][0].name == "MultiHopAbstractQuerySynthesizer"
        assert synthesizers[1][1] == 20

    def test_helpers(self, kg, llm):
        quick = quick_sdg_source(kg, llm)
        assert quick.persona_count == 3
        assert quick.synthesizer_specs == [("single-hop-specific", 100)]

        diverse = diverse_sdg_source(kg, llm, single_hop=40, multi_hop_specific=60)
        assert diverse.name == "diverse-sdg"
        assert diverse.synthesizer_specs == [("single-hop-specific", 40), ("multi-hop-specific", 60)]
