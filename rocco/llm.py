"""LLM client — HTTP connection to a chat-completion backend with tool calling.

The orchestrator injects an LLM callable matching the protocol:

    async def __call__(self, request: ChatRequest) -> ChatResponse: ...

Two implementations are provided:

    HttpLLM   — real HTTP client for OpenAI-compatible /chat/completions
                 endpoints (Groq by default). Tools are sent with
                 tool_choice="auto"; the reply's tool calls come back raw and
                 are validated by the actions themselves.
    EchoLLM   — replies with the text of the last turn. Useful for
                 smoke-testing the bot wiring without a running model.

Production code constructs an HttpLLM from config and passes it to run_turn().
Tests use stub LLMs defined in the test modules instead.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from rocco.models import ChatRequest, ChatResponse, ToolCall

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, request: ChatRequest) -> ChatResponse: ...


# ---------------------------------------------------------------------------
# HttpLLM — connects to a real backend
# ---------------------------------------------------------------------------

class HttpLLM:
    """Async HTTP client for OpenAI-compatible chat-completion backends.

    POST {base_url}/chat/completions
      {"model": ..., "messages": [...], "tools": [...], "tool_choice": "auto"}
    Response:
      {"choices": [{"message": {"content": "...", "tool_calls": [...]}}]}

    Args:
        base_url: Base URL of the backend, e.g. "https://api.groq.com/openai/v1".
        api_key:  Bearer token, or empty string if not required.
        model:    Model identifier.
        timeout:  HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        model: str = "",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_body(self, request: ChatRequest) -> dict:
        messages = [{"role": "system", "content": request.system_prompt}]
        messages.extend(
            {"role": t.role, "content": t.content} for t in request.turns
        )
        body: dict = {"messages": messages}
        if self._model:
            body["model"] = self._model
        if request.tools:
            body["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.parameters,
                    },
                }
                for tool in request.tools
            ]
            body["tool_choice"] = request.tool_choice
        return body

    def _parse_response(self, data: dict) -> ChatResponse:
        """Extract the reply text and tool calls from the response body."""
        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices or "message" not in choices[0]:
            raise LLMError("Unexpected response format from chat-completion backend")
        message = choices[0]["message"] or {}

        calls: list[ToolCall] = []
        for raw in message.get("tool_calls") or []:
            function = raw.get("function") or {}
            if "name" not in function:
                logger.warning("Tool call without a function name skipped: %r", raw)
                continue
            calls.append(ToolCall(
                id=raw.get("id", ""),
                name=function["name"],
                arguments=function.get("arguments") or "{}",
            ))
        return ChatResponse(text=message.get("content") or "", tool_calls=calls)

    async def __call__(self, request: ChatRequest) -> ChatResponse:
        url = f"{self._base_url}/chat/completions"
        body = self._build_body(request)
        logger.debug(
            "llm call url=%s turns=%d tools=%d", url, len(request.turns), len(request.tools),
        )

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise LLMError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"Request to LLM backend failed: {e!r}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a body that is not JSON") from e
        response = self._parse_response(data)
        logger.debug(
            "llm response len=%d tool_calls=%d", len(response.text), len(response.tool_calls),
        )
        return response


# ---------------------------------------------------------------------------
# EchoLLM — repeats the last turn; useful for wiring smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Replies with the content of the last turn. No network calls, no tools.

    User turns carry a JSON provenance payload, so the echo is that payload
    verbatim. Good enough to check that history fetching, normalisation and
    reply delivery are wired together.
    """

    async def __call__(self, request: ChatRequest) -> ChatResponse:
        logger.debug("EchoLLM turns=%d", len(request.turns))
        if not request.turns:
            return ChatResponse()
        return ChatResponse(text=request.turns[-1].content)


# ---------------------------------------------------------------------------
# LLMError — raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
