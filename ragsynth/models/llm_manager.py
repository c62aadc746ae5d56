"""
LLM Manager for handling different language model providers.

Providers implement the text-generation capability consumed by the
transforms, the persona generator and the synthesizers:
``generate(prompt) -> str`` and ``generate_object(prompt, schema) -> schema``.
"""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..exceptions import ConfigurationError, GenerationFailure

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def resolve_env_vars(value: str) -> str:
    """Resolve environment variables in string values like ${VAR_NAME}."""
    if isinstance(value, str) and "${" in value:
        def replace_env_var(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))

        return re.sub(r'\$\{([^}]+)\}', replace_env_var, value)
    return value


def parse_structured_output(text: str, schema: Type[SchemaT]) -> SchemaT:
    """
    Parse a model response into ``schema``.

    The first JSON object found in the text is used, so replies wrapped in
    prose or code fences are accepted.

    Raises:
        GenerationFailure: No JSON object was found or it does not match the schema
    """
    if not text:
        raise GenerationFailure(f"Empty response, expected {schema.__name__}")

    json_match = re.search(r'\{.*\}', text, re.DOTALL)
    json_str = json_match.group() if json_match else text

    try:
        return schema.model_validate(json.loads(json_str))
    except (json.JSONDecodeError, ValidationError) as e:
        raise GenerationFailure(f"Response does not match {schema.__name__}: {e}") from e


@dataclass
class LLMConfig:
    """Configuration for LLM providers."""
    provider: str
    model: str
    temperature: float = 0.1
    max_tokens: int = 2000
    api_key: Optional[str] = None

    def __post_init__(self):
        """Resolve environment variables after initialization."""
        if self.api_key:
            self.api_key = resolve_env_vars(self.api_key)
            # unset variable, fall back to the provider's default env var
            if "${" in self.api_key:
                self.api_key = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate text using the LLM."""
        pass

    async def generate_object(self, prompt: str, schema: Type[SchemaT], **kwargs) -> SchemaT:
        """Generate a structured object conforming to a pydantic schema."""
        structured_prompt = f"""{prompt}

Respond ONLY with a JSON object that conforms to this JSON schema. Do not include any other text.

{json.dumps(schema.model_json_schema(), indent=2)}"""

        response = await self.generate(structured_prompt, json_mode=True, **kwargs)
        return parse_structured_output(response, schema)


class OpenAIProvider(LLMProvider):
    """OpenAI provider implementation."""

    def __init__(self, config: LLMConfig):
        self.config = config
        self.api_key = config.api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ConfigurationError("OpenAI API key not found")

        try:
            from openai import AsyncOpenAI
            self.client = AsyncOpenAI(api_key=self.api_key)
        except ImportError:
            raise ImportError("openai package required: pip install openai")

    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate text using OpenAI."""
        params: Dict[str, Any] = {
            "model": self.config.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "temperature": kwargs.get("temperature", self.config.temperature),
        }
        if kwargs.get("json_mode"):
            params["response_format"] = {"type": "json_object"}

        try:
            response = await self.client.chat.completions.create(**params)
            return response.choices[0].message.content
        except Exception as e:
            logger.error(f"OpenAI generation error: {e}")
            raise


class AnthropicProvider(LLMProvider):
    """Anthropic provider implementation."""

    def __init__(self, config: LLMConfig):
        self.config = config
        self.api_key = config.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ConfigurationError("Anthropic API key not found")

        try:
            import anthropic
            self.client = anthropic.AsyncAnthropic(api_key=self.api_key)
        except ImportError:
            raise ImportError("anthropic package required: pip install anthropic")

    async def generate(self, prompt: str, **kwargs) -> str:
        """Generate text using Anthropic."""
        try:
            response = await self.client.messages.create(
                model=self.config.model,
                max_tokens=kwargs.get("max_tokens", self.config.max_tokens),
                temperature=kwargs.get("temperature", self.config.temperature),
                messages=[{"role": "user", "content": prompt}]
            )
            return response.content[0].text
        except Exception as e:
            logger.error(f"Anthropic generation error: {e}")
            raise


PROVIDER_CLASSES: Dict[str, Type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
}


class LLMManager(LLMProvider):
    """
    Manager for handling different LLM providers.

    Reads the ``llm`` section of the configuration, initializes every
    provider listed there and routes calls to the default one. The manager
    itself satisfies the text-generation capability, so it can be handed
    directly to transforms, persona generation and synthesizers.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.providers: Dict[str, LLMProvider] = {}
        self._initialize_providers()

        llm_config = self.config.get("llm", {})
        self.default_provider = llm_config.get("default_provider") or next(iter(self.providers))
        if self.default_provider not in self.providers:
            raise ConfigurationError(f"Default provider {self.default_provider} not available")

    def _initialize_providers(self):
        """Initialize available LLM providers."""
        llm_config = self.config.get("llm", {})

        for name, provider_class in PROVIDER_CLASSES.items():
            if name not in llm_config:
                continue

            provider_settings = llm_config[name] or {}
            provider_config = LLMConfig(
                provider=name,
                model=provider_settings.get("model", DEFAULT_MODELS[name]),
                temperature=provider_settings.get("temperature", 0.1),
                max_tokens=provider_settings.get("max_tokens", 2000),
                api_key=provider_settings.get("api_key")
            )
            try:
                self.providers[name] = provider_class(provider_config)
                logger.info(f"{name} provider initialized with model {provider_config.model}")
            except Exception as e:
                logger.warning(f"Failed to initialize {name} provider: {e}")

        if not self.providers:
            raise ConfigurationError("No LLM providers could be initialized")

    def _get_provider(self, provider: Optional[str]) -> LLMProvider:
        provider_name = provider or self.default_provider
        if provider_name not in self.providers:
            raise ConfigurationError(f"Provider {provider_name} not available")
        return self.providers[provider_name]

    async def generate(self, prompt: str, provider: Optional[str] = None, **kwargs) -> str:
        """Generate text using specified or default provider."""
        return await self._get_provider(provider).generate(prompt, **kwargs)

    async def generate_object(
        self, prompt: str, schema: Type[SchemaT], provider: Optional[str] = None, **kwargs
    ) -> SchemaT:
        """Generate a structured object using specified or default provider."""
        return await self._get_provider(provider).generate_object(prompt, schema, **kwargs)

    def get_available_providers(self) -> List[str]:
        """Get list of available providers."""
        return list(self.providers.keys())
