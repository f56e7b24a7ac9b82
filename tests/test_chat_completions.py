"""
Tests for the OpenAI-compatible /v1/chat/completions endpoint.

Run with: pytest tests/test_chat_completions.py -v
"""

import json

import pytest

from conftest import CHAT_BODY, parse_sse

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "get_weather",
        "description": "Current weather for a city",
        "parameters": {"type": "object", "properties": {"location": {"type": "string"}}},
    },
}


class TestChatCompletion:
    """Test non-streaming chat completions."""

    def test_text_response(self, client):
        response = client.post("/v1/chat/completions", json=CHAT_BODY)
        assert response.status_code == 200

        data = response.json()
        assert data["id"].startswith("chatcmpl-")
        assert data["object"] == "chat.completion"
        assert data["model"] == CHAT_BODY["model"]
        assert data["system_fingerprint"].startswith("fp_")
        assert "time_info" in data

        choice = data["choices"][0]
        assert choice["finish_reason"] == "stop"
        assert choice["message"]["role"] == "assistant"
        assert choice["message"]["content"].endswith(".")

        usage = data["usage"]
        # "Tell me a story" is 15 bytes
        assert usage["prompt_tokens"] == 4
        assert usage["total_tokens"] == usage["prompt_tokens"] + usage["completion_tokens"]
        assert usage["prompt_tokens_details"]["cached_tokens"] == 0

    def test_multipart_content(self, client):
        body = {
            "model": "m",
            "messages": [{
                "role": "user",
                "content": [
                    {"type": "text", "text": "abcd"},
                    {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
                ],
            }],
        }
        response = client.post("/v1/chat/completions", json=body)
        assert response.status_code == 200
        assert response.json()["usage"]["prompt_tokens"] == 1

    def test_tool_call(self, client):
        body = {
            "model": "m",
            "messages": [{"role": "user", "content": "What's the weather in Paris?"}],
            "tools": [WEATHER_TOOL],
        }
        data = client.post("/v1/chat/completions", json=body).json()

        choice = data["choices"][0]
        assert choice["finish_reason"] == "tool_calls"
        assert choice["message"]["content"] is None

        call = choice["message"]["tool_calls"][0]
        assert call["type"] == "function"
        assert call["function"]["name"] == "get_weather"
        assert json.loads(call["function"]["arguments"]) == {"location": "Paris"}
        assert data["usage"]["completion_tokens"] == 15

    def test_trigger_without_tools_is_text(self, client):
        body = {"model": "m", "messages": [{"role": "user", "content": "search for cats"}]}
        choice = client.post("/v1/chat/completions", json=body).json()["choices"][0]
        assert choice["finish_reason"] == "stop"
        assert isinstance(choice["message"]["content"], str)

    def test_only_last_user_turn_triggers_tools(self, client):
        body = {
            "model": "m",
            "messages": [
                {"role": "user", "content": "What's the weather in Paris?"},
                {"role": "assistant", "content": "Sunny."},
                {"role": "user", "content": "Thanks, bye"},
            ],
            "tools": [WEATHER_TOOL],
        }
        choice = client.post("/v1/chat/completions", json=body).json()["choices"][0]
        assert choice["finish_reason"] == "stop"

    def test_tool_result_ends_the_loop(self, client):
        """After the tool answers, the model replies with text instead of calling again."""
        body = {
            "model": "m",
            "messages": [
                {"role": "user", "content": "What's the weather in Paris?"},
                {"role": "assistant", "content": None, "tool_calls": [{
                    "id": "call_1",
                    "type": "function",
                    "function": {"name": "get_weather", "arguments": "{\"location\": \"Paris\"}"},
                }]},
                {"role": "tool", "tool_call_id": "call_1", "content": "Sunny, 21C"},
            ],
            "tools": [WEATHER_TOOL],
        }
        choice = client.post("/v1/chat/completions", json=body).json()["choices"][0]
        assert choice["finish_reason"] == "stop"
        assert isinstance(choice["message"]["content"], str)

    def test_extra_fields_accepted(self, client):
        body = {**CHAT_BODY, "user": "abc", "seed": 3, "logprobs": False, "n": 1}
        assert client.post("/v1/chat/completions", json=body).status_code == 200


class TestChatCompletionStream:
    """Test streamed chat completions."""

    def test_stream_shape(self, client):
        response = client.post("/v1/chat/completions", json={**CHAT_BODY, "stream": True})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"

        assert response.text.endswith("data: [DONE]\n\n")

        events = parse_sse(response.text)
        assert all(name is None for name, _ in events)
        assert events[-1] == (None, "[DONE]")

        chunks = [data for _, data in events[:-1]]
        assert chunks[0]["choices"][0]["delta"] == {"role": "assistant"}
        assert chunks[-1]["choices"][0]["finish_reason"] == "stop"
        assert len({c["id"] for c in chunks}) == 1
        assert all(c["object"] == "chat.completion.chunk" for c in chunks)

        text = "".join(c["choices"][0]["delta"].get("content", "") for c in chunks)
        assert len(text.split()) == CHAT_BODY["max_tokens"]
        assert text.endswith(".")
        # Usage only when asked for
        assert "usage" not in chunks[-1]

    def test_stream_usage_matches_deltas(self, client):
        body = {**CHAT_BODY, "stream": True, "stream_options": {"include_usage": True}}
        events = parse_sse(client.post("/v1/chat/completions", json=body).text)
        chunks = [data for _, data in events[:-1]]

        deltas = [c["choices"][0]["delta"]["content"] for c in chunks if "content" in c["choices"][0]["delta"]]
        expected = sum((len(d.encode()) + 3) // 4 for d in deltas)

        usage = chunks[-1]["usage"]
        assert usage["completion_tokens"] == expected
        assert usage["total_tokens"] == usage["prompt_tokens"] + expected

    def test_stream_max_completion_tokens(self, client):
        body = {
            "model": "m",
            "messages": [{"role": "user", "content": "hi"}],
            "max_completion_tokens": 5,
            "stream": True,
        }
        events = parse_sse(client.post("/v1/chat/completions", json=body).text)
        text = "".join(d["choices"][0]["delta"].get("content", "") for _, d in events[:-1])
        assert len(text.split()) == 5

    def test_stream_tool_call(self, client):
        body = {
            "model": "m",
            "messages": [{"role": "user", "content": "Search the web for pandas"}],
            "tools": [WEATHER_TOOL],
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        events = parse_sse(client.post("/v1/chat/completions", json=body).text)
        chunks = [data for _, data in events[:-1]]

        start = chunks[1]["choices"][0]["delta"]["tool_calls"][0]
        assert start["function"] == {"name": "get_weather", "arguments": ""}
        args = chunks[2]["choices"][0]["delta"]["tool_calls"][0]["function"]["arguments"]
        assert json.loads(args) == {"location": "pandas"}

        assert chunks[-1]["choices"][0]["finish_reason"] == "tool_calls"
        assert chunks[-1]["usage"]["completion_tokens"] == 15


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
