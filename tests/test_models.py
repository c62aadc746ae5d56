"""
Tests for model providers, shared utilities and document ingestion.
"""

import asyncio
import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from ragsynth.exceptions import ConfigurationError, GenerationFailure
from ragsynth.ingestion import DocumentProcessor
from ragsynth.models import LLMConfig, LLMManager, LLMProvider, create_embedding_model, parse_structured_output
from ragsynth.persona import PersonaSchema
from ragsynth.utils import bounded_gather, cosine_similarity, shuffle


class EchoProvider(LLMProvider):
    """Provider returning a canned response and recording calls."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    async def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        return self.response


class TestStructuredOutput:
    """Test structured output parsing."""

    def test_parses_plain_json(self):
        result = parse_structured_output('{"name": "Pilot", "description": "Flies"}', PersonaSchema)
        assert result == PersonaSchema(name="Pilot", description="Flies")

    def test_parses_json_wrapped_in_prose(self):
        text = 'Here you go:\n```json\n{"name": "Pilot", "description": "Flies"}\n```'
        assert parse_structured_output(text, PersonaSchema).name == "Pilot"

    @pytest.mark.parametrize("text", ["", "no json here", '{"name": "Pilot"}'])
    def test_rejects_invalid_output(self, text):
        with pytest.raises(GenerationFailure):
            parse_structured_output(text, PersonaSchema)

    @pytest.mark.asyncio
    async def test_generate_object_requests_json(self):
        provider = EchoProvider('{"name": "Pilot", "description": "Flies"}')

        result = await provider.generate_object("Describe a persona", PersonaSchema)

        prompt, kwargs = provider.calls[0]
        assert result.description == "Flies"
        assert prompt.startswith("Describe a persona")
        assert '"description"' in prompt
        assert kwargs["json_mode"] is True


class TestLLMManager:
    """Test LLM Manager functionality."""

    @pytest.fixture
    def config(self):
        return {
            "llm": {
                "default_provider": "openai",
                "openai": {
                    "api_key": "test_key",
                    "model": "gpt-4o-mini",
                    "temperature": 0.1,
                    "max_tokens": 2000
                }
            }
        }

    @pytest.fixture
    def llm_manager(self, config):
        return LLMManager(config)

    def test_initialization(self, llm_manager):
        """Test LLM manager initialization."""
        assert llm_manager.default_provider == "openai"
        assert llm_manager.get_available_providers() == ["openai"]

    @pytest.mark.asyncio
    async def test_generate(self, llm_manager):
        """Test text generation."""
        mock_response = Mock()
        mock_response.choices = [Mock()]
        mock_response.choices[0].message.content = "Test response"

        llm_manager.providers["openai"].client.chat.completions.create = AsyncMock(return_value=mock_response)

        result = await llm_manager.generate("Test prompt")
        assert result == "Test response"

    @pytest.mark.asyncio
    async def test_generate_object_uses_json_mode(self, llm_manager):
        mock_response = Mock()
        mock_response.choices = [Mock()]
        mock_response.choices[0].message.content = '{"name": "Pilot", "description": "Flies"}'
        create = AsyncMock(return_value=mock_response)
        llm_manager.providers["openai"].client.chat.completions.create = create

        result = await llm_manager.generate_object("Describe a persona", PersonaSchema)

        assert result.name == "Pilot"
        assert create.await_args.kwargs["response_format"] == {"type": "json_object"}

    def test_unknown_provider(self, llm_manager):
        with pytest.raises(ConfigurationError):
            asyncio.run(llm_manager.generate("Test prompt", provider="missing"))

    def test_no_providers(self):
        with pytest.raises(ConfigurationError):
            LLMManager({"llm": {}})

    def test_env_var_resolution(self, monkeypatch):
        monkeypatch.setenv("RAGSYNTH_TEST_KEY", "secret")
        assert LLMConfig(provider="openai", model="m", api_key="${RAGSYNTH_TEST_KEY}").api_key == "secret"

        monkeypatch.delenv("RAGSYNTH_TEST_KEY")
        assert LLMConfig(provider="openai", model="m", api_key="${RAGSYNTH_TEST_KEY}").api_key is None

    def test_unsupported_embedding_provider(self):
        with pytest.raises(ConfigurationError):
            create_embedding_model({"embeddings": {"provider": "word2vec"}})


class TestUtils:
    """Test shared helpers."""

    @pytest.mark.asyncio
    async def test_bounded_gather_limits_concurrency(self):
        running = 0
        peak = 0

        async def work(item):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01 * (5 - item))
            running -= 1
            return item * 2

        results = await bounded_gather(list(range(5)), work, concurrency=2)

        assert results == [0, 2, 4, 6, 8]
        assert peak == 2

    @pytest.mark.asyncio
    async def test_bounded_gather_return_exceptions(self):
        async def work(item):
            if item == 1:
                raise RuntimeError("boom")
            return item

        results = await bounded_gather([0, 1, 2], work, return_exceptions=True)

        assert results[0] == 0 and results[2] == 2
        assert isinstance(results[1], RuntimeError)

    @pytest.mark.asyncio
    async def test_bounded_gather_rejects_zero_concurrency(self):
        async def work(item):
            return item

        with pytest.raises(ValueError):
            await bounded_gather([1], work, concurrency=0)

    def test_cosine_similarity(self):
        assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
        assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
        assert cosine_similarity([0, 0], [1, 0]) == 0.0

    def test_shuffle_returns_copy(self):
        items = [1, 2, 3, 4]
        shuffled = shuffle(items)
        assert sorted(shuffled) == items
        assert shuffled is not items


class TestDocumentProcessor:
    """Test document loading."""

    @pytest.fixture
    def data_dir(self, tmp_path):
        (tmp_path / "notes.txt").write_text("Plain text notes.", encoding="utf-8")
        (tmp_path / "guides").mkdir()
        (tmp_path / "guides" / "intro.md").write_text("# Intro\n\nMarkdown body.", encoding="utf-8")
        (tmp_path / "facts.json").write_text(json.dumps({"planet": "Mars"}), encoding="utf-8")
        (tmp_path / "empty.txt").write_text("   ", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"\x89PNG")
        return tmp_path

    def test_load_documents(self, data_dir):
        documents = DocumentProcessor({}).load_documents(data_dir)

        assert [d.id for d in documents] == ["facts.json", "guides/intro.md", "notes.txt"]
        assert all(d.type == "document" for d in documents)

        intro = documents[1]
        assert intro.content == "# Intro\n\nMarkdown body."
        assert intro.metadata["file_name"] == "intro.md"
        assert intro.metadata["format"] == "md"
        assert json.loads(documents[0].content) == {"planet": "Mars"}

    def test_supported_formats_from_config(self, data_dir):
        documents = DocumentProcessor({"supported_formats": ["txt"]}).load_documents(data_dir)
        assert [d.id for d in documents] == ["notes.txt"]

    def test_single_file(self, data_dir):
        documents = DocumentProcessor().load_documents(data_dir / "notes.txt")
        assert [d.id for d in documents] == ["notes.txt"]

    def test_unreadable_file_is_skipped(self, data_dir):
        (data_dir / "broken.json").write_text("{not json", encoding="utf-8")
        documents = DocumentProcessor().load_documents(data_dir)
        assert "broken.json" not in [d.id for d in documents]

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DocumentProcessor().load_documents(tmp_path / "missing")
