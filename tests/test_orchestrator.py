# tests/test_orchestrator.py
import asyncio
import json
from typing import AsyncIterator, List, Optional, Sequence

import pytest

from flash_ui.core.errors import ErrorKind, GenerationError
from flash_ui.services.orchestrator import (
    FALLBACK_STYLES,
    ArtifactEvent,
    EventKind,
    Orchestrator,
    apply_event,
    parse_string_array,
    strip_code_fences,
)
from flash_ui.services.sessions import Artifact, ArtifactStatus, StyleReference

NAMES = ["A", "B", "C", "D", "E"]


class FakeClient:
    """In-process GenerationClient: canned label text, canned increments per stream."""

    def __init__(
        self,
        answer: str = json.dumps(NAMES),
        chunks: Sequence[str] = ("He", "llo"),
        *,
        fail_on: Sequence[str] = (),
        generate_fail: Optional[Exception] = None,
        variation_chunks: Sequence[str] = (),
    ) -> None:
        self.answer = answer
        self.chunks = list(chunks)
        self.fail_on = list(fail_on)
        self.generate_fail = generate_fail
        self.variation_chunks = list(variation_chunks)
        self.generate_prompts: List[str] = []
        self.stream_prompts: List[str] = []

    async def generate(self, prompt: str, *, model: Optional[str] = None) -> str:
        self.generate_prompts.append(prompt)
        await asyncio.sleep(0)
        if self.generate_fail is not None:
            raise self.generate_fail
        return self.answer

    async def stream_generate(
        self, prompt: str, *, temperature: Optional[float] = None, model: Optional[str] = None
    ) -> AsyncIterator[str]:
        self.stream_prompts.append(prompt)
        failing = any(marker in prompt for marker in self.fail_on)
        for i, chunk in enumerate(self.chunks):
            await asyncio.sleep(0)
            if failing and i == 1:
                raise GenerationError("gemini rate limit exceeded.", kind=ErrorKind.RATE_LIMITED, status=429)
            yield chunk

    async def stream_variations(self, prompt: str, *, model: Optional[str] = None) -> AsyncIterator[str]:
        self.stream_prompts.append(prompt)
        for chunk in self.variation_chunks:
            await asyncio.sleep(0)
            yield chunk


@pytest.mark.asyncio
async def test_generate_completes_every_slot():
    # Five slots, each stream replays "He" + "llo"; all end Complete with the joined text.
    client = FakeClient()
    orch = Orchestrator(client)
    session = await orch.generate("  a login form ")

    assert session.prompt == "a login form"
    assert [a.label for a in session.artifacts] == NAMES
    for a in session.artifacts:
        assert a.status is ArtifactStatus.COMPLETE
        assert a.text == "Hello"
        assert a.html == "Hello"
    assert orch.store.active.id == session.id
    assert len(client.stream_prompts) == 5
    assert all("STYLE THEME:" in p for p in client.stream_prompts)


@pytest.mark.asyncio
async def test_one_failing_task_does_not_touch_siblings():
    # Slot "C" fails after its first increment; it alone ends in Error, keeping what it received.
    client = FakeClient(fail_on=["**STYLE THEME: C**"])
    session = await Orchestrator(client).generate("pricing table")

    by_id = {a.id: a for a in session.artifacts}
    failed = session.artifacts[2]
    assert failed.status is ArtifactStatus.ERROR
    assert failed.label == "Error"
    assert failed.text == "He"
    assert "Design Generation Failed" in failed.diagnostic
    assert "rate limit" in failed.diagnostic
    others = [a for aid, a in by_id.items() if aid != failed.id]
    assert all(a.status is ArtifactStatus.COMPLETE and a.html == "Hello" for a in others)


@pytest.mark.asyncio
async def test_text_is_raw_concatenation_and_html_is_unfenced():
    chunks = ["```html\n<b>", "bold", "</b>\n```"]
    session = await Orchestrator(FakeClient(chunks=chunks)).generate("badge")
    for a in session.artifacts:
        assert a.text == "".join(chunks)
        assert a.html == "<b>bold</b>"


@pytest.mark.asyncio
async def test_empty_output_is_an_error():
    session = await Orchestrator(FakeClient(chunks=["  ", "```"])).generate("card")
    for a in session.artifacts:
        assert a.status is ArtifactStatus.ERROR
        assert "No HTML content received from API" in a.diagnostic


@pytest.mark.asyncio
async def test_label_failure_fails_every_slot():
    # Without style names there is nothing to fan out: every slot ends in Error and no stream starts.
    client = FakeClient(generate_fail=GenerationError("boom"))
    session = await Orchestrator(client).generate("navbar")
    assert all(a.status is ArtifactStatus.ERROR for a in session.artifacts)
    assert "Failed to generate style themes: boom" in session.artifacts[0].diagnostic
    assert client.stream_prompts == []


@pytest.mark.asyncio
async def test_unparseable_names_fall_back(caplog_info):
    session = await Orchestrator(FakeClient(answer="Sure! Here are some ideas.")).generate("modal")
    assert [a.label for a in session.artifacts] == list(FALLBACK_STYLES)
    assert "using fallbacks" in caplog_info.text


@pytest.mark.asyncio
async def test_blank_prompt_is_rejected():
    with pytest.raises(ValueError):
        await Orchestrator(FakeClient()).generate("   ")


@pytest.mark.asyncio
async def test_concurrent_sessions_keep_their_own_writes():
    # A newer session becomes active; the older one keeps receiving its own increments
    # and finishes, and no artifact ever gets another session's text.
    client = FakeClient()
    orch = Orchestrator(client)
    first, second = await asyncio.gather(orch.generate("one"), orch.generate("two"))

    assert orch.store.active.id == second.id
    assert [s.id for s in orch.store.list()] == [first.id, second.id]
    for session in (first, second):
        assert all(a.id.startswith(session.id) for a in session.artifacts)
        assert all(a.status is ArtifactStatus.COMPLETE and a.text == "Hello" for a in session.artifacts)


@pytest.mark.asyncio
async def test_more_like_this_seeds_original():
    client = FakeClient()
    orch = Orchestrator(client)
    source = await orch.generate("login form")
    client.stream_prompts.clear()

    similar = await orch.more_like_this(source.id, source.artifacts[0].id)
    assert similar.prompt == "Similar to: login form"
    seeded = similar.artifacts[0]
    assert seeded.label == "A (Original)"
    assert seeded.status is ArtifactStatus.COMPLETE
    assert seeded.html == "Hello"
    assert [a.label for a in similar.artifacts[1:]] == NAMES[:4]
    assert len(client.stream_prompts) == 4
    assert orch.store.active.id == similar.id


@pytest.mark.asyncio
async def test_more_like_this_requires_complete_source():
    orch = Orchestrator(FakeClient(fail_on=["**STYLE THEME: A**"]))
    source = await orch.generate("login form")
    with pytest.raises(ValueError):
        await orch.more_like_this(source.id, source.artifacts[0].id)


@pytest.mark.asyncio
async def test_blend_spreads_ratios_across_slots():
    client = FakeClient()
    orch = Orchestrator(client)
    source = await orch.generate("hero")
    client.stream_prompts.clear()

    blended = await orch.blend(source.id, source.artifacts[0].id, source.artifacts[1].id)
    assert blended.prompt == "Blend: A + B"
    assert blended.artifacts[0].label == "A × B (50/50)"
    assert "STYLE A (70% influence)" in client.stream_prompts[1]
    assert "STYLE B (30% influence)" in client.stream_prompts[1]
    assert all(a.status is ArtifactStatus.COMPLETE for a in blended.artifacts)


@pytest.mark.asyncio
async def test_explore_and_apply_variation():
    lines = ['{"name": "Wizard", "html": "<form>', '1</form>"}\n{"name": "Time', 'line", "html": "<ol></ol>"}']
    client = FakeClient(variation_chunks=lines)
    orch = Orchestrator(client)
    session = await orch.generate("checkout")
    target = session.artifacts[0]

    variations = await orch.explore_variations(session.id, target.id)
    assert variations == [
        {"name": "Wizard", "html": "<form>1</form>"},
        {"name": "Timeline", "html": "<ol></ol>"},
    ]
    assert "STYLE REFERENCE (A)" in client.stream_prompts[-1]

    applied = orch.apply_variation(session.id, target.id, variations[1])
    assert (applied.label, applied.html, applied.text) == ("Timeline", "<ol></ol>", "<ol></ol>")
    assert orch.store.get(session.id).artifacts[0] == applied


@pytest.mark.asyncio
async def test_variations_need_a_style_reference():
    orch = Orchestrator(FakeClient(fail_on=["**STYLE THEME: A**"]))
    session = await orch.generate("checkout")
    failed = session.artifacts[0]
    with pytest.raises(ValueError):
        await orch.explore_variations(session.id, failed.id)
    with pytest.raises(ValueError):
        orch.apply_variation(session.id, failed.id, {"name": "X", "html": "<p/>"})


@pytest.mark.asyncio
async def test_locked_style_reaches_every_prompt():
    client = FakeClient()
    orch = Orchestrator(client)
    ref = StyleReference(label="Ref", html="<i>ref</i>")
    session = await orch.generate("sidebar", locked_style=ref)
    assert all("STYLE REFERENCE - MATCH THIS AESTHETIC" in p for p in client.stream_prompts)
    assert all("<i>ref</i>" in p for p in client.stream_prompts)

    locked = orch.lock_style(session.id, session.artifacts[2].id)
    assert locked == StyleReference(label="C", html="Hello")
    client.stream_prompts.clear()
    remixed = await orch.remix_layout(session.id, locked)
    assert remixed.prompt == "sidebar"
    assert all("Hello" in p and "MATCH THIS AESTHETIC" in p for p in client.stream_prompts)


@pytest.mark.asyncio
async def test_suggest_words():
    client = FakeClient(answer='Here: ["wizard", "timeline", " ", "kanban", "stepper", "grid", "list"]')
    orch = Orchestrator(client)
    assert await orch.suggest_words("a settings form", "form") == ["wizard", "timeline", "kanban", "stepper", "grid"]
    assert await orch.suggest_words("   ", "form") == []
    assert len(client.generate_prompts) == 1


def test_events_after_terminal_are_ignored():
    done = Artifact(id="s_0", label="A", text="Hello", status=ArtifactStatus.COMPLETE, html="Hello")
    late = ArtifactEvent("s", "s_0", EventKind.INCREMENT, "!")
    assert apply_event(done, late) is done
    assert apply_event(done, ArtifactEvent("s", "s_0", EventKind.ERROR, "x")) is done
    # labels may still change
    assert apply_event(done, ArtifactEvent("s", "s_0", EventKind.LABEL, "B")).label == "B"


def test_helpers():
    assert strip_code_fences("```html\n<div></div>\n```") == "<div></div>"
    assert strip_code_fences("```\n<p/>```") == "<p/>"
    assert strip_code_fences("<p/>") == "<p/>"
    assert parse_string_array('```json\n["a", "b"]\n```') == ["a", "b"]
    assert parse_string_array("[not json]") == []
    assert parse_string_array('{"a": 1}') == []


def test_slot_count_floor():
    with pytest.raises(ValueError):
        Orchestrator(FakeClient(), slot_count=1)


@pytest.mark.asyncio
async def test_select_session_moves_active_pointer():
    orch = Orchestrator(FakeClient())
    first = await orch.generate("one")
    second = await orch.generate("two")
    assert orch.store.active.id == second.id

    assert orch.select_session(first.id).id == first.id
    assert orch.store.active.id == first.id
    with pytest.raises(KeyError):
        orch.select_session("missing")
    assert orch.store.active.id == first.id
