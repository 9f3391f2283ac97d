"""Claude API wrapper with async support and retry logic."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import anthropic
from tenacity import RetryCallState, retry, retry_if_exception_type, wait_exponential

from magic_writer.errors import MalformedResponseError, ServiceUnavailableError
from magic_writer.models.attachments import AttachedFile
from magic_writer.utils.json_parser import extract_json

logger = logging.getLogger(__name__)


def _stop_after_max_retries(retry_state: RetryCallState) -> bool:
    """Stop once the client's configured attempt count is used up."""
    client = retry_state.args[0]
    return retry_state.attempt_number >= client.max_retries


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude API client with exponential-backoff retries."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        self.max_retries = max_retries
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    @retry(
        retry=retry_if_exception_type(anthropic.APIError),
        stop=_stop_after_max_retries,
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def _call_api(self, **kwargs) -> anthropic.types.Message:
        """Make the actual API call with retry logic."""
        return await self.client.messages.create(**kwargs)

    async def _create(self, model: str, **kwargs) -> anthropic.types.Message:
        logger.debug("LLM call: model=%s", model)
        try:
            message = await self._call_api(model=model, **kwargs)
        except anthropic.APIError as exc:
            logger.error("LLM call failed", exc_info=True)
            raise ServiceUnavailableError(str(exc)) from exc
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))
        return message

    @staticmethod
    def _user_content(prompt: str, attachments: Sequence[AttachedFile]) -> str | list[dict]:
        if not attachments:
            return prompt
        content: list[dict] = [{"type": "text", "text": prompt}]
        for file in attachments:
            block = file.to_content_block()
            if block is not None:
                content.append(block)
        return content

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = "claude-haiku-4-5-20251001",
        temperature: float = 0.0,
        max_tokens: int = 8192,
        attachments: Sequence[AttachedFile] = (),
    ) -> LLMResponse:
        """Send a prompt (plus optional files) and return the text response with usage."""
        kwargs: dict = {
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": self._user_content(prompt, attachments)}],
        }
        if system:
            kwargs["system"] = system
        message = await self._create(model, **kwargs)
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )
        return LLMResponse(
            text=text,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )

    async def generate_structured(
        self,
        prompt: str,
        *,
        tool_name: str,
        schema: dict,
        system: str = "",
        model: str = "claude-haiku-4-5-20251001",
        temperature: float = 0.0,
        max_tokens: int = 8192,
    ) -> dict | list:
        """Force a single tool call whose input must follow ``schema``.

        Returns the tool input. If the model answers in plain text instead,
        JSON is extracted from the text; MalformedResponseError is raised
        when neither yields a value.
        """
        kwargs: dict = {
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
            "tools": [
                {
                    "name": tool_name,
                    "description": f"Report the {tool_name.replace('_', ' ')} result.",
                    "input_schema": schema,
                }
            ],
            "tool_choice": {"type": "tool", "name": tool_name},
        }
        if system:
            kwargs["system"] = system
        message = await self._create(model, **kwargs)
        text_parts = []
        for block in message.content:
            block_type = getattr(block, "type", None)
            if block_type == "tool_use" and block.name == tool_name:
                if not isinstance(block.input, dict):
                    raise MalformedResponseError(f"{tool_name} input is not an object")
                return block.input
            if block_type == "text":
                text_parts.append(block.text)
        if not text_parts:
            raise MalformedResponseError(f"Model did not call {tool_name}")
        logger.debug("%s answered in text, extracting JSON", tool_name)
        try:
            return extract_json("".join(text_parts))
        except ValueError as exc:
            raise MalformedResponseError(f"Model did not call {tool_name}") from exc

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
