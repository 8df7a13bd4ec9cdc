# tests/test_api_generate.py
import json

import pytest

from conftest import Fault, StubProvider
from flash_ui.core import config


def _frames(body: str):
    # every `data:` payload in an event-stream body, in order
    return [line[len("data: "):] for line in body.split("\n") if line.startswith("data: ")]


@pytest.mark.asyncio
async def test_health_ok(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {
        "status": "ok",
        "default_model": config.DEFAULT_MODEL,
        "providers": ["claude", "gemini", "openai"],
    }


@pytest.mark.asyncio
async def test_models_lists_catalog(client):
    r = await client.get("/models")
    assert r.status_code == 200
    data = r.json()
    assert data["default"] == config.DEFAULT_MODEL
    providers = {m["provider"] for m in data["models"]}
    assert providers == {"gemini", "claude", "openai"}


@pytest.mark.asyncio
async def test_generate_non_stream(client, use_provider):
    stub = use_provider(StubProvider(text="<div>hi</div>"))
    r = await client.post("/generate", json={"prompt": "a card", "temperature": 0.3})
    assert r.status_code == 200
    assert r.json() == {"text": "<div>hi</div>"}
    assert stub.requests[0].prompt == "a card"
    assert stub.requests[0].temperature == 0.3
    assert stub.requests[0].model_id == config.DEFAULT_MODEL


@pytest.mark.asyncio
async def test_missing_prompt_is_400(client, use_provider):
    use_provider(StubProvider(text="unused"))
    for body in ({}, {"prompt": ""}):
        r = await client.post("/generate", json=body)
        assert r.status_code == 400
        assert r.json() == {"error": "Prompt is required"}


@pytest.mark.asyncio
async def test_unknown_model_is_400(client):
    r = await client.post("/generate", json={"prompt": "x", "model": "no-such-model"})
    assert r.status_code == 400
    assert "no-such-model" in r.json()["error"]


@pytest.mark.asyncio
async def test_missing_credential_is_500(client, monkeypatch):
    # The real factory reads the key at request time; an unset key is a configuration error.
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    r = await client.post("/generate", json={"prompt": "x"})
    assert r.status_code == 500
    assert "GEMINI_API_KEY" in r.json()["error"]


@pytest.mark.asyncio
async def test_temperature_out_of_range_is_400(client, use_provider):
    use_provider(StubProvider(text="unused"))
    r = await client.post("/generate", json={"prompt": "x", "temperature": 7})
    assert r.status_code == 400
    assert "temperature" in r.json()["error"]


@pytest.mark.asyncio
async def test_upstream_rate_limit_keeps_status(client, use_provider, caplog_info):
    # A classified provider failure answers with the classified status and kind.
    use_provider(StubProvider(fail=Fault("rate limit exceeded", status_code=429)))
    r = await client.post("/generate", json={"prompt": "x"})
    assert r.status_code == 429
    body = r.json()
    assert body["kind"] == "RateLimited"
    assert "gemini" in body["error"]
    assert "gemini API error" in caplog_info.text


@pytest.mark.asyncio
async def test_stream_frames_then_done(client, use_provider):
    use_provider(StubProvider(["Hel", "lo"]))
    r = await client.post("/generate", json={"prompt": "x", "stream": True})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    frames = _frames(r.text)
    assert [json.loads(f)["text"] for f in frames[:-1]] == ["Hel", "lo"]
    assert frames[-1] == "[DONE]"


@pytest.mark.asyncio
async def test_stream_with_no_output_is_just_done(client, use_provider):
    use_provider(StubProvider([]))
    r = await client.post("/generate", json={"prompt": "x", "stream": True})
    assert r.status_code == 200
    assert _frames(r.text) == ["[DONE]"]


@pytest.mark.asyncio
async def test_stream_failing_up_front_gets_http_status(client, use_provider):
    # Nothing was sent yet, so a bad key still comes back as a plain 401.
    use_provider(StubProvider([], fail=Fault("Invalid API key", status_code=401)))
    r = await client.post("/generate", json={"prompt": "x", "stream": True})
    assert r.status_code == 401
    assert r.json()["kind"] == "AuthError"


@pytest.mark.asyncio
async def test_stream_mid_error_is_framed_and_terminated(client, use_provider, caplog_info):
    # Tests what happens if the provider fails after the first increment:
    # - the increment already sent stays in the body
    # - an error frame carries the classified failure
    # - the terminal frame still closes the stream, with status 200
    use_provider(StubProvider(["partial "], fail=RuntimeError("network dropped")))
    r = await client.post("/generate", json={"prompt": "stream please", "stream": True})
    assert r.status_code == 200
    frames = _frames(r.text)
    assert json.loads(frames[0]) == {"text": "partial "}
    error = json.loads(frames[1])
    assert error["error"] == "gemini error: network dropped"
    assert error["kind"] == "Unknown"
    assert frames[-1] == "[DONE]"
    assert "stream failed mid-generation" in caplog_info.text


@pytest.mark.asyncio
async def test_variations_wraps_prompt(client, use_provider):
    stub = use_provider(StubProvider(['{"name": "A", "html": "<p/>"}\n']))
    r = await client.post("/variations", json={"prompt": "a pricing table"})
    assert r.status_code == 200
    assert json.loads(_frames(r.text)[0])["text"].startswith('{"name": "A"')
    sent = stub.requests[0]
    assert "a pricing table" in sent.prompt
    assert "RADICAL VARIATIONS" in sent.prompt
    assert sent.temperature == config.VARIATION_TEMPERATURE


@pytest.mark.asyncio
async def test_variations_requires_prompt(client, use_provider):
    use_provider(StubProvider([]))
    r = await client.post("/variations", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Prompt is required"}
