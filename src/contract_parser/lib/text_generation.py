"""Generative text capability used by the AI-primary extraction paths.

The parsing core only depends on the ``TextGenerator`` protocol. The
Semantic Kernel adapter in this module is the production implementation:
it sends a single user message to a chat completion service, bounds every
attempt with a timeout, and retries with exponential backoff.

Whether the capability exists at all is decided once, when
``build_text_generator`` is called with the configured ``LLMConfig``.
A ``None`` generator means "AI unavailable" for the lifetime of the
components built from it.
"""

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from contract_parser.lib.errors import (
    AITimeoutError,
    AIUnavailableError,
    TextGenerationError,
)
from contract_parser.lib.logging_config import get_logger
from contract_parser.models.config import LLMConfig, ProviderEnum

if TYPE_CHECKING:
    from semantic_kernel.connectors.ai.chat_completion_client_base import (
        ChatCompletionClientBase,
    )

logger = get_logger(__name__)

CONNECTION_TEST_PROMPT = "Reply with just the word 'OK' to confirm you are working."


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling options for a single generation call.

    Attributes:
        temperature: Sampling temperature (near zero for deterministic labels).
        max_tokens: Upper bound on generated tokens, or None for the default.
    """

    temperature: float = 0.0
    max_tokens: int | None = None


@runtime_checkable
class TextGenerator(Protocol):
    """Provider-agnostic text generation capability."""

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate a completion for a single prompt.

        Args:
            prompt: The full prompt text.
            options: Sampling options.

        Returns:
            The reply text, stripped of surrounding whitespace.

        Raises:
            TextGenerationError: If the call fails or times out.
        """
        ...


@dataclass
class RetryConfig:
    """Configuration for exponential backoff retry logic.

    Attributes:
        max_retries: Maximum number of attempts (default: 2).
        base_delay: Initial delay in seconds before first retry (default: 1.0).
        exponential_base: Multiplier for exponential backoff (default: 2.0).
        max_delay: Maximum delay cap in seconds (default: 10.0).
    """

    max_retries: int = 2
    base_delay: float = 1.0
    exponential_base: float = 2.0
    max_delay: float = 10.0


class SKTextGenerator:
    """TextGenerator backed by a Semantic Kernel chat completion service.

    Example:
        >>> from semantic_kernel.connectors.ai.open_ai import OpenAIChatCompletion
        >>> service = OpenAIChatCompletion(ai_model_id="gpt-4o-mini")
        >>> generator = SKTextGenerator(chat_service=service, model_id="gpt-4o-mini")
        >>> reply = await generator.generate(prompt, GenerationOptions(0.0, 10))
    """

    DEFAULT_TIMEOUT = 60.0

    def __init__(
        self,
        chat_service: "ChatCompletionClientBase",
        model_id: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            chat_service: Semantic Kernel chat completion service instance.
            model_id: Model identifier recorded in extraction bookkeeping.
            timeout: Per-attempt timeout in seconds.
            retry_config: Retry behaviour. Uses defaults if not provided.
        """
        self._chat_service = chat_service
        self._model_id = model_id
        self._timeout = timeout
        self._retry_config = retry_config or RetryConfig()

    @property
    def model_id(self) -> str | None:
        """Get the configured model identifier."""
        return self._model_id

    def _create_settings(self, options: GenerationOptions) -> Any:
        """Build provider-specific prompt execution settings.

        Args:
            options: Sampling options to apply.

        Returns:
            PromptExecutionSettings instance for the wrapped service.
        """
        settings_cls = self._chat_service.get_prompt_execution_settings_class()
        settings = settings_cls()

        if hasattr(settings, "temperature"):
            settings.temperature = options.temperature

        if options.max_tokens is not None:
            if hasattr(settings, "max_tokens"):
                settings.max_tokens = options.max_tokens
            if hasattr(settings, "max_completion_tokens"):
                settings.max_completion_tokens = options.max_tokens

        if self._model_id and hasattr(settings, "ai_model_id"):
            settings.ai_model_id = self._model_id

        return settings

    async def _call_llm(self, prompt: str, options: GenerationOptions) -> str:
        """Call the chat service once with the given prompt.

        Args:
            prompt: The prompt to send.
            options: Sampling options.

        Returns:
            The last message content, stripped, or empty string.
        """
        # Import here to keep semantic_kernel off the import path of the core
        from semantic_kernel.contents import ChatHistory

        chat_history = ChatHistory()
        chat_history.add_user_message(prompt)

        result = await asyncio.wait_for(
            self._chat_service.get_chat_message_contents(
                chat_history=chat_history,
                settings=self._create_settings(options),
            ),
            timeout=self._timeout,
        )

        if result:
            content = result[-1].content
            return str(content).strip() if content else ""
        return ""

    def _get_retry_delay(self, attempt: int, error: Exception | None = None) -> float:
        """Calculate retry delay with exponential backoff.

        Args:
            attempt: Current attempt number (0-indexed).
            error: The exception that triggered the retry (may carry Retry-After).

        Returns:
            Delay in seconds before next retry.
        """
        if error is not None:
            headers = getattr(error, "headers", None)
            retry_after = None
            if isinstance(headers, dict):
                retry_after = headers.get("Retry-After")
            elif headers is not None and hasattr(headers, "get"):
                retry_after = headers.get("Retry-After")

            if retry_after is not None:
                try:
                    return min(float(retry_after), self._retry_config.max_delay)
                except (ValueError, TypeError):
                    pass

        delay = self._retry_config.base_delay * (
            self._retry_config.exponential_base**attempt
        )
        return min(delay, self._retry_config.max_delay)

    def _is_rate_limit_error(self, error: Exception) -> bool:
        """Check if error is a rate limit (HTTP 429) error."""
        return getattr(error, "status_code", None) == 429

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """Generate a reply, retrying failed attempts with backoff.

        Args:
            prompt: The full prompt text.
            options: Sampling options.

        Returns:
            The reply text, stripped of surrounding whitespace.

        Raises:
            AITimeoutError: If the final attempt timed out.
            TextGenerationError: If the final attempt failed for any other reason.
        """
        max_retries = self._retry_config.max_retries

        for attempt in range(max_retries):
            try:
                return await self._call_llm(prompt, options)
            except asyncio.TimeoutError as e:
                if attempt == max_retries - 1:
                    raise AITimeoutError(self._timeout) from e
                delay = self._get_retry_delay(attempt)
            except Exception as e:
                if attempt == max_retries - 1:
                    raise TextGenerationError(
                        f"Text generation failed after {max_retries} attempts: {e}"
                    ) from e
                if self._is_rate_limit_error(e):
                    logger.warning("Rate limited by chat completion provider")
                delay = self._get_retry_delay(attempt, e)

            logger.debug(
                f"Retry attempt {attempt + 1}/{max_retries} after {delay:.2f}s delay"
            )
            await asyncio.sleep(delay)

        raise TextGenerationError("Text generation was not attempted")


def create_chat_service(llm_config: LLMConfig) -> Any:
    """Create a Semantic Kernel chat completion service for a provider.

    Args:
        llm_config: Generative capability configuration.

    Returns:
        Chat completion service instance.

    Raises:
        AIUnavailableError: If the provider cannot be initialized.
    """
    from semantic_kernel.connectors.ai.open_ai import (
        AzureChatCompletion,
        OpenAIChatCompletion,
    )

    logger.debug(
        f"Configuring LLM service: provider={llm_config.provider.value}, "
        f"model={llm_config.name}"
    )

    try:
        if llm_config.provider == ProviderEnum.AZURE_OPENAI:
            return AzureChatCompletion(
                deployment_name=llm_config.name,
                endpoint=llm_config.endpoint,
                api_key=llm_config.api_key,
            )
        if llm_config.provider == ProviderEnum.OPENAI:
            return OpenAIChatCompletion(
                ai_model_id=llm_config.name,
                api_key=llm_config.api_key,
            )
        if llm_config.provider == ProviderEnum.ANTHROPIC:
            try:
                from semantic_kernel.connectors.ai.anthropic import (
                    AnthropicChatCompletion,
                )
            except ImportError as e:
                raise AIUnavailableError(
                    "Anthropic provider requires 'anthropic' package. "
                    "Install with: pip install anthropic"
                ) from e
            return AnthropicChatCompletion(
                ai_model_id=llm_config.name,
                api_key=llm_config.api_key,
            )
    except AIUnavailableError:
        raise
    except Exception as e:
        raise AIUnavailableError(
            f"Failed to initialize {llm_config.provider.value} chat service: {e}"
        ) from e

    raise AIUnavailableError(f"Unsupported LLM provider: {llm_config.provider}")


def build_text_generator(llm_config: LLMConfig | None) -> SKTextGenerator | None:
    """Build the generative capability once from configuration.

    Args:
        llm_config: LLM configuration, or None when no provider is configured.

    Returns:
        A ready text generator, or None when the capability is absent or
        cannot be initialized.
    """
    if llm_config is None:
        logger.info("No LLM configured, using rule-based extraction only")
        return None

    try:
        service = create_chat_service(llm_config)
    except AIUnavailableError as e:
        logger.warning(f"{e}. Falling back to rule-based extraction")
        return None

    return SKTextGenerator(
        chat_service=service,
        model_id=llm_config.name,
        timeout=llm_config.timeout,
        retry_config=RetryConfig(max_retries=llm_config.max_retries),
    )


async def check_connection(generator: TextGenerator | None) -> bool:
    """Check the generative capability answers a trivial prompt.

    Args:
        generator: The generator to check, or None.

    Returns:
        True when a non-empty reply comes back, False otherwise.
    """
    if generator is None:
        logger.warning("No text generator configured")
        return False

    logger.info(f"Testing AI connection with prompt: {CONNECTION_TEST_PROMPT}")
    try:
        reply = await generator.generate(
            CONNECTION_TEST_PROMPT, GenerationOptions(temperature=0.0, max_tokens=5)
        )
    except Exception as e:
        logger.error(f"AI connection test failed: {e}")
        return False

    logger.info(f"AI connection test result: {reply}")
    return bool(reply)
