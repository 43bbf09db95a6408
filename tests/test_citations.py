from playground.citations import FALLBACK_TITLE, extract_citations


def _tool_part(results, state="output-available", key="results", name="webSearch", call_id="c1"):
    return {
        "type": f"tool-{name}",
        "toolCallId": call_id,
        "state": state,
        "input": {"query": "q"},
        "output": {key: results},
    }


def test_numbering_follows_order_across_parts():
    parts = [
        {"type": "text", "text": "intro"},
        _tool_part([
            {"title": "A", "url": "https://a.example", "content": "alpha"},
            {"url": "https://b.example", "content": "beta"},
        ]),
        _tool_part([{"title": "C", "url": "https://c.example"}], call_id="c2"),
    ]

    citations = extract_citations(parts)

    assert [c.number for c in citations] == ["1", "2", "3"]
    assert [c.url for c in citations] == ["https://a.example", "https://b.example", "https://c.example"]
    assert citations[0].description == "alpha"
    assert citations[1].title == FALLBACK_TITLE == "Source"
    assert citations[2].description is None


def test_entry_without_url_takes_no_number():
    parts = [_tool_part([
        {"title": "No link", "content": "x"},
        {"title": "Empty", "url": ""},
        {"title": "Linked", "url": "https://ok.example"},
    ])]

    citations = extract_citations(parts)

    assert len(citations) == 1
    assert citations[0].number == "1"
    assert citations[0].title == "Linked"


def test_repeated_calls_give_identical_output():
    parts = [_tool_part([{"title": "A", "url": "https://a.example"}])]
    assert extract_citations(parts) == extract_citations(parts)
    assert extract_citations(parts)[0].number == "1"


def test_duplicate_urls_are_not_merged():
    parts = [
        _tool_part([{"url": "https://same.example"}]),
        _tool_part([{"url": "https://same.example"}], call_id="c2"),
    ]
    assert [c.number for c in extract_citations(parts)] == ["1", "2"]


def test_results_key_wins_over_search_results():
    part = _tool_part([{"url": "https://primary.example"}])
    part["output"]["search_results"] = [{"url": "https://secondary.example"}]
    assert [c.url for c in extract_citations([part])] == ["https://primary.example"]

    empty = _tool_part([])
    empty["output"]["search_results"] = [{"url": "https://secondary.example"}]
    assert extract_citations([empty]) == []


def test_search_results_key_is_read():
    part = _tool_part([{"title": "S", "url": "https://s.example"}], key="search_results")
    assert extract_citations([part])[0].url == "https://s.example"


def test_description_is_truncated():
    part = _tool_part([{"url": "https://long.example", "content": "x" * 500}])
    assert len(extract_citations([part])[0].description) == 200


def test_only_completed_tool_parts_count():
    parts = [
        _tool_part([{"url": "https://pending.example"}], state="input-available"),
        _tool_part([{"url": "https://failed.example"}], state="output-error"),
        {"type": "text", "state": "output-available", "output": {"results": [{"url": "https://text.example"}]}},
        _tool_part([{"url": "https://done.example"}], call_id="c3"),
    ]
    citations = extract_citations(parts)
    assert [c.url for c in citations] == ["https://done.example"]
    assert citations[0].number == "1"


def test_dynamic_tool_parts_count():
    part = {
        "type": "dynamic-tool",
        "toolName": "webSearch",
        "toolCallId": "d1",
        "state": "output-available",
        "output": {"results": [{"url": "https://dyn.example"}]},
    }
    assert extract_citations([part])[0].url == "https://dyn.example"


def test_missing_or_odd_output_is_skipped():
    parts = [
        {"type": "tool-webSearch", "state": "output-available"},
        {"type": "tool-webSearch", "state": "output-available", "output": "plain text"},
        {"type": "tool-webSearch", "state": "output-available", "output": {"results": "nope"}},
    ]
    assert extract_citations(parts) == []
