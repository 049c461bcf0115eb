"""
LLM provider configuration for PydanticAI
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

import anthropic
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from plancritic.config.settings import Settings, get_settings
from plancritic.exceptions import AIProviderException, PlanCriticException

logger = logging.getLogger(__name__)

_TRANSIENT_STATUS_CODES = frozenset({408, 409, 429, 500, 502, 503, 504, 529})


@dataclass
class GenerationSettings:
    """Per-request generation parameters"""

    model: str = ""
    temperature: float = 0.2
    max_tokens: int = 4096
    seed: Optional[int] = None
    timeout: Optional[float] = None


class LLMProvider(Protocol):
    """Anything that turns a prompt into response text"""

    name: str

    def generate(self, prompt: str, settings: GenerationSettings) -> str:
        """Return the model's text or raise AIProviderException"""
        ...


def is_transient_error(exc: BaseException) -> bool:
    """Errors worth retrying: connection problems, timeouts, 429 and 5xx"""
    if isinstance(exc, ModelHTTPError):
        return exc.status_code in _TRANSIENT_STATUS_CODES
    return isinstance(
        exc,
        (
            ConnectionError,
            TimeoutError,
            anthropic.APIConnectionError,
            openai.APIConnectionError,
        ),
    )


class PydanticAIProvider:
    """Plain-text generation through a PydanticAI model"""

    def __init__(
        self,
        name: str,
        model_factory: Callable[[str], Model],
        default_model: str,
        pinned_model: Optional[str] = None,
        retries: int = 3,
        wait=None,
    ):
        self.name = name
        self.model_factory = model_factory
        self.default_model = default_model
        self.pinned_model = pinned_model
        self.retries = max(1, retries)
        self.wait = wait or wait_exponential(multiplier=1, min=2, max=30)

    def resolve_model_name(self, settings: GenerationSettings) -> str:
        """Model pinned by the flag wins, then the request's, then the default"""
        return self.pinned_model or settings.model or self.default_model

    def generate(self, prompt: str, settings: GenerationSettings) -> str:
        model_name = self.resolve_model_name(settings)
        model_settings = ModelSettings(
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
        if settings.seed is not None:
            model_settings["seed"] = settings.seed
        if settings.timeout:
            model_settings["timeout"] = settings.timeout

        retrying = Retrying(
            stop=stop_after_attempt(self.retries),
            wait=self.wait,
            retry=retry_if_exception(is_transient_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    text = self._run(prompt, model_name, model_settings)
        except PlanCriticException:
            raise
        except Exception as e:
            logger.error(f"{self.name} generation failed: {e}")
            raise AIProviderException(
                message=f"{self.name}: generation failed",
                provider=self.name,
                model=model_name,
                original_error=e,
            )

        if not text:
            raise AIProviderException(
                message=f"{self.name}: no text content in response",
                provider=self.name,
                model=model_name,
            )
        return text

    def _run(self, prompt: str, model_name: str, model_settings: ModelSettings) -> str:
        agent = Agent(self.model_factory(model_name), output_type=str)
        result = agent.run_sync(prompt, model_settings=model_settings)

        usage = result.usage()
        logger.info(
            f"{self.name}/{model_name} responded",
            extra={
                "operation": "llm_generate",
                "input_tokens": getattr(usage, "input_tokens", None),
                "output_tokens": getattr(usage, "output_tokens", None),
            },
        )
        return result.output


@dataclass
class MockProvider:
    """
    Test double returning canned responses.

    With several responses, each call consumes the next one and the last is
    repeated once the list runs out. Every prompt received is kept in calls.
    """

    response: str = ""
    responses: Sequence[str] = ()
    error: Optional[Exception] = None
    name: str = "mock"
    calls: List[str] = field(default_factory=list)

    def generate(self, prompt: str, settings: GenerationSettings) -> str:
        self.calls.append(prompt)
        if self.error is not None:
            if isinstance(self.error, AIProviderException):
                raise self.error
            raise AIProviderException(
                message=f"mock: {self.error}",
                provider=self.name,
                original_error=self.error,
            )
        if self.responses:
            index = min(len(self.calls), len(self.responses)) - 1
            return self.responses[index]
        return self.response


def _api_key(configured: Optional[str], env_var: str) -> Optional[str]:
    return configured or os.getenv(env_var)


def get_anthropic_provider(
    settings: Settings, pinned_model: Optional[str] = None
) -> PydanticAIProvider:
    """Configure an Anthropic-backed provider"""
    api_key = _api_key(settings.anthropic_api_key, "ANTHROPIC_API_KEY")
    if not api_key:
        raise AIProviderException(
            message="ANTHROPIC_API_KEY environment variable not set",
            provider="anthropic",
        )

    base_url = settings.anthropic_base_url or os.getenv("ANTHROPIC_BASE_URL")
    if base_url:
        logger.info(f"Using custom Anthropic base URL: {base_url}")
        provider = AnthropicProvider(
            anthropic_client=AsyncAnthropic(api_key=api_key, base_url=base_url)
        )
    else:
        provider = AnthropicProvider(api_key=api_key)

    return PydanticAIProvider(
        name="anthropic",
        model_factory=lambda model_name: AnthropicModel(model_name, provider=provider),
        default_model=settings.anthropic_model_name,
        pinned_model=pinned_model,
        retries=settings.ai_retries,
    )


def get_openai_provider(
    settings: Settings, pinned_model: Optional[str] = None
) -> PydanticAIProvider:
    """Configure an OpenAI-backed provider"""
    api_key = _api_key(settings.openai_api_key, "OPENAI_API_KEY")
    if not api_key:
        raise AIProviderException(
            message="OPENAI_API_KEY environment variable not set",
            provider="openai",
        )

    base_url = settings.openai_base_url or os.getenv("OPENAI_BASE_URL")
    if base_url:
        logger.info(f"Using custom OpenAI base URL: {base_url}")
        provider = OpenAIProvider(
            openai_client=AsyncOpenAI(api_key=api_key, base_url=base_url)
        )
    else:
        provider = OpenAIProvider(api_key=api_key)

    return PydanticAIProvider(
        name="openai",
        model_factory=lambda model_name: OpenAIChatModel(model_name, provider=provider),
        default_model=settings.openai_model_name,
        pinned_model=pinned_model,
        retries=settings.ai_retries,
    )


def resolve_provider(
    model_flag: str = "", settings: Optional[Settings] = None
) -> LLMProvider:
    """
    Select a provider from the model flag and available API keys

    Args:
        model_flag: 'anthropic:<model>', 'claude-*', 'openai:<model>', 'gpt-*',
            or anything else to auto-detect from the environment

    Returns:
        Configured provider

    Raises:
        AIProviderException: when no provider can be configured
    """
    settings = settings or get_settings()
    lower = model_flag.lower()

    if lower.startswith("anthropic:"):
        return get_anthropic_provider(settings, model_flag[len("anthropic:") :])
    if lower.startswith("claude"):
        return get_anthropic_provider(settings, model_flag)
    if lower.startswith("openai:"):
        return get_openai_provider(settings, model_flag[len("openai:") :])
    if lower.startswith("gpt"):
        return get_openai_provider(settings, model_flag)

    if _api_key(settings.anthropic_api_key, "ANTHROPIC_API_KEY"):
        return get_anthropic_provider(settings)
    if _api_key(settings.openai_api_key, "OPENAI_API_KEY"):
        return get_openai_provider(settings)

    raise AIProviderException(
        message="no LLM provider configured: set ANTHROPIC_API_KEY or OPENAI_API_KEY",
        details={"requested_model": model_flag or "(auto)"},
    )
