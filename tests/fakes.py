from typing import Any, Dict, List, Optional


def text_turn(text: str, chunks: Optional[List[str]] = None) -> Dict[str, Any]:
    return {"content": text, "chunks": chunks}


def tool_turn(name: str = "webSearch", query: str = "X", call_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "content": "",
        "tool_calls": [{"id": call_id or "", "name": name, "arguments": {"query": query}}],
    }


def error_turn(message: str = "upstream exploded") -> Dict[str, Any]:
    return {"error": message}


class FakeGatewayClient:
    """Scripted model gateway: each call consumes the next turn.

    When the script runs out, ``default_turn`` is replayed (an empty
    text turn unless set).
    """

    def __init__(self, turns: Optional[List[Dict[str, Any]]] = None, default_turn: Optional[Dict[str, Any]] = None):
        self.turns = list(turns or [])
        self.default_turn = default_turn or text_turn("")
        self.calls: List[Dict[str, Any]] = []
        self._ids = 0

    def _next(self) -> Dict[str, Any]:
        turn = self.turns.pop(0) if self.turns else self.default_turn
        calls = []
        for tc in turn.get("tool_calls") or []:
            self._ids += 1
            calls.append({**tc, "id": tc.get("id") or f"call_{self._ids}"})
        return {**turn, "tool_calls": calls}

    def _record(self, stream: bool, **kwargs) -> None:
        self.calls.append({"stream": stream, **kwargs})

    async def chat(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        provider_options: Optional[Dict[str, Any]] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        self._record(False, model=model, messages=list(messages), tools=tools,
                     provider_options=provider_options, response_format=response_format)
        turn = self._next()
        if turn.get("error"):
            return {"error": turn["error"]}
        return {
            "content": turn.get("content") or "",
            "tool_calls": turn["tool_calls"],
            "finish_reason": "tool_calls" if turn["tool_calls"] else "stop",
        }

    async def chat_stream(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        provider_options: Optional[Dict[str, Any]] = None,
        response_format: Optional[Dict[str, Any]] = None,
    ):
        self._record(True, model=model, messages=list(messages), tools=tools,
                     provider_options=provider_options, response_format=response_format)
        turn = self._next()
        if turn.get("error"):
            yield {"type": "error", "error": turn["error"]}
            return
        chunks = turn.get("chunks")
        if chunks is None:
            chunks = [turn["content"]] if turn.get("content") else []
        for piece in chunks:
            yield {"type": "content", "content": piece}
        for tc in turn["tool_calls"]:
            yield {"type": "tool_call", "tool_call": tc}
        yield {"type": "done", "finish_reason": "tool_calls" if turn["tool_calls"] else "stop"}


class FakeValyuClient:
    def __init__(self, results: Optional[List[Dict[str, Any]]] = None, error: Optional[Dict[str, Any]] = None):
        self.results = results if results is not None else [
            {"title": "Example", "url": "https://example.com", "content": "Example content"},
        ]
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    @property
    def enabled(self) -> bool:
        return True

    async def search(
        self,
        query: str,
        search_type: str = "all",
        max_num_results: Optional[int] = None,
        included_sources: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        self.calls.append({
            "query": query,
            "search_type": search_type,
            "max_num_results": max_num_results,
            "included_sources": included_sources,
        })
        if self.error is not None:
            return self.error
        return {"success": True, "results": list(self.results)}

    async def close(self) -> None:
        return None
