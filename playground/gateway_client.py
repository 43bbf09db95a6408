"""Model gateway streaming client (OpenAI-compatible chat completions)."""

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from .config import config

logger = logging.getLogger(__name__)


def low_latency_options() -> Dict[str, Any]:
    """Force routing through the low-latency upstream."""
    return {"gateway": {"order": list(config.low_latency_order)}}


def provider_options_for(model: str) -> Optional[Dict[str, Any]]:
    """Routing hint for the low-latency group, None for default routing."""
    if model in config.low_latency_models:
        return low_latency_options()
    return None


def _parse_arguments(raw: Any) -> Any:
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        # Left as a string; the step loop reports it as a tool error
        return raw


def _normalize_tool_call(tc: Dict[str, Any]) -> Dict[str, Any]:
    func = tc.get("function", {}) or {}
    return {
        "id": tc.get("id") or "",
        "name": func.get("name", ""),
        "arguments": _parse_arguments(func.get("arguments")),
    }


class GatewayClient:
    """
    Async client for an OpenAI-compatible model gateway.

    Handles:
    - Streaming chat completions (SSE)
    - Batched chat completions
    - Tool call assembly (argument fragments arrive across chunks)
    - Model listing
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        self.client = httpx.AsyncClient(timeout=httpx.Timeout(config.model_timeout, connect=10.0))
        self.base_url = (base_url or config.gateway_url).rstrip("/")
        self.api_key = api_key if api_key is not None else config.gateway_api_key

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _payload(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]],
        provider_options: Optional[Dict[str, Any]],
        response_format: Optional[Dict[str, Any]],
        stream: bool,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": stream,
        }
        if tools:
            payload["tools"] = tools
        if provider_options:
            payload["providerOptions"] = provider_options
        if response_format:
            payload["response_format"] = response_format
        return payload

    async def list_models(self) -> List[Dict[str, Any]]:
        """List models exposed by the gateway."""
        try:
            resp = await self.client.get(f"{self.base_url}/models", headers=self._headers())
            resp.raise_for_status()
            return resp.json().get("data", [])
        except Exception as e:
            logger.error(f"Failed to list models: {e}")
            return []

    async def chat_stream(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        provider_options: Optional[Dict[str, Any]] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[Dict[str, Any]]:
        """
        Stream one chat completion from the gateway.

        Yields chunks with structure:
        - {"type": "content", "content": "..."} - text delta
        - {"type": "tool_call", "tool_call": {"id", "name", "arguments"}} - complete tool call
        - {"type": "done", "finish_reason": ...} - generation complete
        - {"type": "error", "error": "..."} - transport or HTTP fault
        """
        payload = self._payload(model, messages, tools, provider_options, response_format, stream=True)

        logger.info(f"Starting chat stream: model={model}, messages={len(messages)}, "
                   f"tools={len(tools) if tools else 0}, routed={bool(provider_options)}")

        # Tool call fragments keyed by index
        pending: Dict[int, Dict[str, Any]] = {}
        finish_reason = None

        try:
            async with self.client.stream(
                "POST",
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=self._headers(),
            ) as response:
                if response.is_error:
                    await response.aread()
                response.raise_for_status()

                async for line in response.aiter_lines():
                    if not line or not line.startswith("data:"):
                        continue

                    data_str = line[5:].strip()
                    if data_str == "[DONE]":
                        break

                    try:
                        chunk = json.loads(data_str)
                    except json.JSONDecodeError:
                        logger.warning(f"Failed to parse chunk: {data_str[:100]}")
                        continue

                    if chunk.get("error"):
                        error = chunk["error"]
                        message = error.get("message") if isinstance(error, dict) else str(error)
                        yield {"type": "error", "error": message or "Unknown error"}
                        return

                    for choice in chunk.get("choices", []):
                        delta = choice.get("delta", {}) or {}

                        for frag in delta.get("tool_calls", []) or []:
                            slot = pending.setdefault(frag.get("index", 0), {
                                "id": "", "function": {"name": "", "arguments": ""},
                            })
                            if frag.get("id"):
                                slot["id"] = frag["id"]
                            func = frag.get("function", {}) or {}
                            # Some providers resend the full name on every delta
                            if func.get("name") and not slot["function"]["name"]:
                                slot["function"]["name"] = func["name"]
                            args = func.get("arguments")
                            if isinstance(args, dict):
                                slot["function"]["arguments"] = args
                            elif args:
                                slot["function"]["arguments"] += args

                        content = delta.get("content")
                        if content:
                            yield {"type": "content", "content": content}

                        if choice.get("finish_reason"):
                            finish_reason = choice["finish_reason"]

        except httpx.HTTPStatusError as e:
            logger.error(f"Gateway HTTP error: {e.response.status_code}")
            yield {"type": "error", "error": _http_error_message(e)}
            return
        except Exception as e:
            logger.error(f"Gateway stream error: {e}")
            yield {"type": "error", "error": str(e) or type(e).__name__}
            return

        for index in sorted(pending):
            yield {"type": "tool_call", "tool_call": _normalize_tool_call(pending[index])}

        yield {"type": "done", "finish_reason": finish_reason}

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        provider_options: Optional[Dict[str, Any]] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Non-streaming chat completion.

        Returns {"content", "tool_calls", "finish_reason"}, or {"error": "..."}.
        """
        payload = self._payload(model, messages, tools, provider_options, response_format, stream=False)

        try:
            resp = await self.client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=self._headers(),
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gateway HTTP error: {e.response.status_code}")
            return {"error": _http_error_message(e)}
        except Exception as e:
            logger.error(f"Gateway sync error: {e}")
            return {"error": str(e) or type(e).__name__}

        choices = data.get("choices") or []
        if not choices:
            return {"error": "Gateway returned no choices"}
        message = choices[0].get("message", {}) or {}
        return {
            "content": message.get("content") or "",
            "tool_calls": [_normalize_tool_call(tc) for tc in message.get("tool_calls") or []],
            "finish_reason": choices[0].get("finish_reason"),
        }


def _http_error_message(e: httpx.HTTPStatusError) -> str:
    try:
        body = e.response.json()
    except Exception:
        return f"Gateway returned HTTP {e.response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str):
        return error
    return f"Gateway returned HTTP {e.response.status_code}"


# Global instance
gateway = GatewayClient()
