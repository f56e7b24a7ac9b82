"""
Tests for the Gemini generateContent endpoints.

Run with: pytest tests/test_gemini.py -v
"""

import pytest

from conftest import parse_sse

MODEL_PATH = "/v1beta/models/gemini-2.0-flash"
WEATHER_TOOL = {
    "functionDeclarations": [{
        "name": "get_weather",
        "description": "Current weather for a city",
        "parameters": {"type": "object", "properties": {"location": {"type": "string"}}},
    }]
}


def content_body(text="Hello", **extra):
    return {"contents": [{"role": "user", "parts": [{"text": text}]}], **extra}


class TestGenerateContent:
    """Test non-streaming generateContent."""

    def test_text_response(self, client):
        response = client.post(f"{MODEL_PATH}:generateContent", json=content_body())
        assert response.status_code == 200

        data = response.json()
        candidate = data["candidates"][0]
        assert candidate["finishReason"] == "STOP"
        assert candidate["index"] == 0
        assert candidate["content"]["role"] == "model"
        assert candidate["content"]["parts"][0]["text"]
        assert data["modelVersion"] == "gemini-2.0-flash"
        assert data["responseId"]

        usage = data["usageMetadata"]
        assert usage["promptTokenCount"] == 2
        assert usage["totalTokenCount"] == usage["promptTokenCount"] + usage["candidatesTokenCount"]

    def test_system_instruction_counted(self, client):
        body = content_body(systemInstruction={"parts": [{"text": "abcdefgh"}]})
        data = client.post(f"{MODEL_PATH}:generateContent", json=body).json()
        assert data["usageMetadata"]["promptTokenCount"] == 4

    def test_function_call(self, client):
        body = content_body("Calculate the distance to Berlin", tools=[WEATHER_TOOL])
        data = client.post(f"{MODEL_PATH}:generateContent", json=body).json()

        candidate = data["candidates"][0]
        assert candidate["finishReason"] == "STOP"
        assert candidate["content"]["parts"][0]["functionCall"] == {
            "name": "get_weather",
            "args": {"location": "Berlin"},
        }
        assert data["usageMetadata"]["candidatesTokenCount"] == 12

    def test_function_response_ends_the_loop(self, client):
        """A trailing functionResponse gets a text answer, not another call."""
        body = {
            "contents": [
                {"role": "user", "parts": [{"text": "What is the weather in Paris?"}]},
                {"role": "model", "parts": [{"functionCall": {"name": "get_weather", "args": {"location": "Paris"}}}]},
                {"role": "function", "parts": [{"functionResponse": {"name": "get_weather", "response": {"temp": 21}}}]},
            ],
            "tools": [WEATHER_TOOL],
        }
        data = client.post(f"{MODEL_PATH}:generateContent", json=body).json()

        part = data["candidates"][0]["content"]["parts"][0]
        assert "functionCall" not in part
        assert part["text"]

    def test_model_with_colon_in_name(self, client):
        response = client.post("/v1beta/models/tunedModels/x:generateContent", json=content_body())
        # Slashes are not part of a model id
        assert response.status_code == 404

        response = client.post("/v1beta/models/gemini:exp:generateContent", json=content_body())
        assert response.status_code == 200
        assert response.json()["modelVersion"] == "gemini:exp"

    def test_unknown_action(self, client):
        response = client.post(f"{MODEL_PATH}:countTokens", json=content_body())
        assert response.status_code == 404
        assert response.json()["error"]["status"] == "NOT_FOUND"

    def test_missing_action(self, client):
        response = client.post(MODEL_PATH, json=content_body())
        assert response.status_code == 400
        assert response.json()["error"]["status"] == "INVALID_ARGUMENT"


class TestStreamGenerateContent:
    """Test streamGenerateContent."""

    def test_stream_chunks(self, client):
        body = content_body(generationConfig={"maxOutputTokens": 7})
        response = client.post(f"{MODEL_PATH}:streamGenerateContent?alt=sse", json=body)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")

        events = parse_sse(response.text)
        assert all(name is None for name, _ in events)
        chunks = [data for _, data in events]

        final = chunks[-1]
        assert final["candidates"][0]["finishReason"] == "STOP"
        assert final["candidates"][0]["content"]["parts"] == []
        assert all("finishReason" not in c["candidates"][0] for c in chunks[:-1])

        texts = [c["candidates"][0]["content"]["parts"][0]["text"] for c in chunks[:-1]]
        assert len("".join(texts).split()) == 7

        # Usage is cumulative and ends at the sum of the streamed parts
        counts = [c["usageMetadata"]["candidatesTokenCount"] for c in chunks]
        assert counts == sorted(counts)
        assert counts[-1] == sum((len(t.encode()) + 3) // 4 for t in texts)

    def test_stream_function_call(self, client):
        body = content_body("search recipes for lasagna", tools=[WEATHER_TOOL])
        events = parse_sse(client.post(f"{MODEL_PATH}:streamGenerateContent", json=body).text)
        chunks = [data for _, data in events]

        assert len(chunks) == 2
        assert chunks[0]["candidates"][0]["content"]["parts"][0]["functionCall"]["args"] == {
            "location": "lasagna"
        }
        assert chunks[1]["candidates"][0]["finishReason"] == "STOP"
        assert chunks[1]["usageMetadata"]["candidatesTokenCount"] == 12


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
