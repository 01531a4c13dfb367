"""
Model client: one system/user exchange with the generative model.

Every call builds a short-lived openai-agents `Agent` whose instructions are
the system prompt and runs it once over the user prompt. In structured mode
the request asks for a JSON object and the reply is decoded into a dict;
otherwise the raw text comes back. The client never retries: the underlying
OpenAI client is created with `max_retries=0` and failures are translated to
the package's error types and raised.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from agents import Agent, ModelSettings, OpenAIChatCompletionsModel, RunConfig, Runner
from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    PermissionDeniedError,
)

from notegen.agents.hooks.custom_agent_hooks import QuietAgentHooks
from notegen.core.config import Config
from notegen.core.errors import (
    AuthError,
    ConfigurationError,
    MalformedResponse,
    NetworkError,
    UpstreamError,
)
from notegen.core.logging_config import get_logger

logger = get_logger(__name__)

JSON_OBJECT_FORMAT = {"response_format": {"type": "json_object"}}


def upstream_error_message(error: APIStatusError) -> str:
    """Pull the human message out of an OpenAI error body, or fall back to the status."""
    body = error.body
    if isinstance(body, dict):
        # The SDK already unwraps {"error": {...}}, but proxies sometimes do not.
        inner = body.get("error", body)
        if isinstance(inner, dict) and inner.get("message"):
            return str(inner["message"])
    return f"service error {error.status_code}"


def decode_json_object(text: Optional[str]) -> dict[str, Any]:
    """Decode a structured-mode reply. Anything but a JSON object is malformed."""
    try:
        payload = json.loads(text or "")
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Model returned invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedResponse(f"Model returned {type(payload).__name__}, expected a JSON object")
    return payload


class ModelClient:
    def __init__(
        self,
        config: Config,
        openai_client: Optional[AsyncOpenAI] = None,
        temperature: Optional[float] = None,
    ):
        self.config = config
        self.temperature = config.TEMPERATURE if temperature is None else temperature
        self._openai_client = openai_client

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if no usable API key is configured. Makes no call."""
        self.config.validate_config(("OPENAI_API_KEY",))

    def _get_client(self) -> AsyncOpenAI:
        self.ensure_configured()
        if self._openai_client is None:
            self._openai_client = AsyncOpenAI(api_key=self.config.OPENAI_API_KEY, max_retries=0)
        return self._openai_client

    def _build_agent(self, name: str, system_instruction: str, structured: bool) -> Agent:
        return Agent(
            name=name,
            instructions=system_instruction,
            model=OpenAIChatCompletionsModel(model=self.config.MODEL_NAME, openai_client=self._get_client()),
            model_settings=ModelSettings(
                temperature=self.temperature,
                extra_body=JSON_OBJECT_FORMAT if structured else None,
            ),
            hooks=QuietAgentHooks(),
        )

    async def complete(
        self,
        system_instruction: str,
        user_instruction: str,
        structured: bool = True,
        *,
        name: str = "Model Client",
    ) -> dict[str, Any] | str:
        """
        Run one prompt/response exchange.

        Args:
            system_instruction: The system role message.
            user_instruction: The user role message.
            structured: If True, force a single JSON object reply and decode it.
            name: Agent name, used for logs.

        Returns:
            The decoded object in structured mode, the raw text otherwise.
        """
        agent = self._build_agent(name, system_instruction, structured)
        logger.info("Calling model for [bold]%s[/bold] (structured=%s)", name, structured)
        try:
            result = await Runner.run(
                agent,
                input=user_instruction,
                run_config=RunConfig(tracing_disabled=True),
                max_turns=1,
            )
        except (AuthenticationError, PermissionDeniedError) as e:
            raise AuthError(upstream_error_message(e)) from e
        except APIStatusError as e:
            raise UpstreamError(upstream_error_message(e), status_code=e.status_code) from e
        except APIConnectionError as e:
            raise NetworkError(f"Could not reach the model API: {e}") from e

        text = result.final_output
        if not structured:
            return (text or "").strip()
        return decode_json_object(text)
