# fans one user request out into N concurrent generation tasks and merges their output
# tasks never touch the session store: they post ArtifactEvents to a queue and a single
# merge step applies them, copy-on-write, keyed by (session id, artifact id)

import asyncio
import itertools
import json
import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import AsyncIterator, Dict, List, Optional, Protocol, Sequence, Tuple

from flash_ui.core import config
from flash_ui.core.errors import GenerationError
from flash_ui.services import prompts
from flash_ui.services.extractor import extract_objects
from flash_ui.services.sessions import (
    Artifact,
    ArtifactStatus,
    Session,
    SessionStore,
    StyleReference,
    new_session,
    render_error_panel,
)

logger = logging.getLogger(__name__)

FALLBACK_STYLES = (
    "Molten Glass Cascade",
    "Pressed Botanical Archive",
    "Neon Noir Circuit",
    "Weathered Industrial Patina",
    "Crystalline Frost Formation",
)
SIMILAR_SUFFIXES = ("Refined", "Bold", "Minimal", "Warm")
BLEND_RATIOS = ((50, 50), (70, 30), (30, 70), (60, 40), (40, 60))

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class GenerationClient(Protocol):
    async def generate(self, prompt: str, *, model: Optional[str] = None) -> str:
        ...

    def stream_generate(
        self, prompt: str, *, temperature: Optional[float] = None, model: Optional[str] = None
    ) -> AsyncIterator[str]:
        ...

    def stream_variations(self, prompt: str, *, model: Optional[str] = None) -> AsyncIterator[str]:
        ...


class EventKind(str, Enum):
    LABEL = "label"
    INCREMENT = "increment"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ArtifactEvent:
    session_id: str
    artifact_id: str
    kind: EventKind
    text: str = ""


def apply_event(artifact: Artifact, event: ArtifactEvent) -> Artifact:
    if event.kind is EventKind.LABEL:
        return replace(artifact, label=event.text)
    if artifact.is_terminal:
        # Streaming -> Complete/Error is one-way
        logger.warning("ignoring %s for finished artifact %s", event.kind.value, artifact.id)
        return artifact
    if event.kind is EventKind.INCREMENT:
        return replace(artifact, text=artifact.text + event.text)
    if event.kind is EventKind.COMPLETE:
        return replace(artifact, status=ArtifactStatus.COMPLETE, html=event.text)
    return replace(
        artifact,
        status=ArtifactStatus.ERROR,
        label="Error",
        diagnostic=render_error_panel(event.text),
    )


def strip_code_fences(text: str) -> str:
    final = text.strip()
    if final.startswith("```html"):
        final = final[7:].lstrip()
    if final.startswith("```"):
        final = final[3:].lstrip()
    if final.endswith("```"):
        final = final[:-3].rstrip()
    return final


def parse_string_array(text: str) -> List[str]:
    match = _JSON_ARRAY_RE.search(text or "")
    if not match:
        return []
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return []
    if not isinstance(parsed, list):
        return []
    return [s for s in (str(item).strip() for item in parsed) if s]


def _pad(names: Sequence[str], count: int) -> List[str]:
    return list(itertools.islice(itertools.cycle(names), count))


def _message(e: Exception) -> str:
    if isinstance(e, GenerationError):
        return e.message
    return str(e) or "Unknown error occurred"


class Orchestrator:
    def __init__(
        self,
        client: GenerationClient,
        store: Optional[SessionStore] = None,
        *,
        model: Optional[str] = None,
        slot_count: int = config.SLOT_COUNT,
    ) -> None:
        if slot_count < 2:
            raise ValueError("slot_count must be at least 2")
        self.client = client
        self.store = store or SessionStore()
        self.model = model
        self.slot_count = slot_count

    # --- workflows ---------------------------------------------------------

    async def generate(self, prompt: str, *, locked_style: Optional[StyleReference] = None) -> Session:
        prompt = prompt.strip()
        if not prompt:
            raise ValueError("prompt is required")
        session = self._start(prompt, ["Designing..."] * self.slot_count)

        try:
            labels = await self._labels(
                prompts.style_themes_prompt(prompt, self.slot_count),
                self.slot_count,
                fallback=FALLBACK_STYLES,
            )
        except Exception as e:
            logger.exception("style themes failed for session %s", session.id)
            self._fail_all(session.id, f"Failed to generate style themes: {_message(e)}")
            return self.store.get(session.id)

        reference_html = locked_style.html if locked_style else None
        jobs = []
        for artifact, label in zip(session.artifacts, labels):
            self._apply(ArtifactEvent(session.id, artifact.id, EventKind.LABEL, label))
            jobs.append((artifact.id, prompts.artifact_prompt(prompt, label, reference_html)))
        await self._fan_out(session.id, jobs)
        return self.store.get(session.id)

    async def remix_layout(self, session_id: str, locked_style: StyleReference) -> Session:
        return await self.generate(self.store.get(session_id).prompt, locked_style=locked_style)

    async def more_like_this(self, session_id: str, artifact_id: str) -> Session:
        source_session, source = self._complete_artifact(session_id, artifact_id)
        session = self._start(
            f"Similar to: {source_session.prompt}",
            [f"{source.label} (Original)"] + ["Designing..."] * (self.slot_count - 1),
        )
        seeded = session.artifacts[0]
        # slot 0 is the source itself; no task is spawned for it
        self.store.update_artifact(
            session.id,
            seeded.id,
            lambda a: replace(a, text=source.html, html=source.html, status=ArtifactStatus.COMPLETE),
        )

        count = self.slot_count - 1
        try:
            labels = await self._labels(
                prompts.similar_styles_prompt(source.html, count),
                count,
                fallback=[f"{source.label} - {suffix}" for suffix in SIMILAR_SUFFIXES],
            )
        except Exception as e:
            logger.exception("similar styles failed for session %s", session.id)
            self._fail_all(session.id, f"Failed to generate styles: {_message(e)}")
            return self.store.get(session.id)

        jobs = []
        for artifact, label in zip(session.artifacts[1:], labels):
            self._apply(ArtifactEvent(session.id, artifact.id, EventKind.LABEL, label))
            jobs.append(
                (artifact.id, prompts.similar_artifact_prompt(source.html, source_session.prompt, label))
            )
        await self._fan_out(session.id, jobs)
        return self.store.get(session.id)

    async def blend(self, session_id: str, first_id: str, second_id: str) -> Session:
        source_session, a = self._complete_artifact(session_id, first_id)
        _, b = self._complete_artifact(session_id, second_id)
        names = _pad(
            [
                f"{a.label} × {b.label} (50/50)",
                f"{a.label} dominant",
                f"{b.label} dominant",
                "Fusion: Structure meets Texture",
                "Hybrid: Best of Both",
            ],
            self.slot_count,
        )
        ratios = _pad(BLEND_RATIOS, self.slot_count)
        session = self._start(f"Blend: {a.label} + {b.label}", names)

        jobs = [
            (artifact.id, prompts.blend_prompt(a.html, b.html, source_session.prompt, ra, rb))
            for artifact, (ra, rb) in zip(session.artifacts, ratios)
        ]
        await self._fan_out(session.id, jobs)
        return self.store.get(session.id)

    async def explore_variations(
        self,
        session_id: str,
        artifact_id: str,
        *,
        locked_style: Optional[StyleReference] = None,
    ) -> List[Dict[str, str]]:
        session = self.store.get(session_id)
        artifact = session.artifact(artifact_id)
        if artifact is None:
            raise KeyError(artifact_id)
        style = locked_style or StyleReference(label=artifact.label, html=artifact.html)
        if not style.html.strip():
            raise ValueError("No style reference available. Generate a design first or lock a style.")

        prompt = prompts.ux_variations_prompt(session.prompt, style.label, style.html.strip())
        variations: List[Dict[str, str]] = []
        async for record in extract_objects(self.client.stream_variations(prompt, model=self.model)):
            name, body = record.get("name"), record.get("html")
            if isinstance(name, str) and isinstance(body, str) and name and body:
                variations.append({"name": name, "html": body})
        return variations

    def apply_variation(self, session_id: str, artifact_id: str, variation: Dict[str, str]) -> Artifact:
        body = variation.get("html")
        if not body:
            raise ValueError("variation has no html")

        def change(a: Artifact) -> Artifact:
            if a.status is not ArtifactStatus.COMPLETE:
                raise ValueError(f"artifact {a.id} is not complete")
            return replace(a, text=body, html=body, label=variation.get("name") or a.label)

        return self.store.update_artifact(session_id, artifact_id, change)

    async def suggest_words(self, prompt: str, word: str, *, style_locked: bool = False) -> List[str]:
        prompt = prompt.strip()
        if not prompt:
            return []
        text = await self.client.generate(
            prompts.word_suggestions_prompt(prompt, word, style_locked), model=self.model
        )
        return parse_string_array(text)[:5]

    def select_session(self, session_id: str) -> Session:
        # moves the active pointer only; running tasks of every session keep writing
        self.store.activate(session_id)
        return self.store.get(session_id)

    def lock_style(self, session_id: str, artifact_id: str) -> StyleReference:
        _, artifact = self._complete_artifact(session_id, artifact_id)
        return StyleReference(label=artifact.label, html=artifact.html)

    # --- machinery ---------------------------------------------------------

    def _start(self, prompt: str, labels: Sequence[str]) -> Session:
        session = new_session(prompt, labels)
        self.store.add(session)
        logger.info("session %s started with %d slots", session.id, len(session.artifacts))
        return session

    def _complete_artifact(self, session_id: str, artifact_id: str) -> Tuple[Session, Artifact]:
        session = self.store.get(session_id)
        artifact = session.artifact(artifact_id)
        if artifact is None:
            raise KeyError(artifact_id)
        if artifact.status is not ArtifactStatus.COMPLETE:
            raise ValueError(f"artifact {artifact_id} is not complete")
        return session, artifact

    async def _labels(self, prompt: str, count: int, *, fallback: Sequence[str]) -> List[str]:
        text = await self.client.generate(prompt, model=self.model)
        names = parse_string_array(text)
        if len(names) < count:
            logger.warning("got %d style names, wanted %d; using fallbacks", len(names), count)
            names = _pad(fallback, count)
        return names[:count]

    def _apply(self, event: ArtifactEvent) -> None:
        self.store.update_artifact(event.session_id, event.artifact_id, lambda a: apply_event(a, event))

    def _fail_all(self, session_id: str, message: str) -> None:
        for artifact in self.store.get(session_id).artifacts:
            self._apply(ArtifactEvent(session_id, artifact.id, EventKind.ERROR, message))

    async def _merge(self, queue: "asyncio.Queue[Optional[ArtifactEvent]]") -> None:
        while True:
            event = await queue.get()
            if event is None:
                return
            self._apply(event)

    async def _fan_out(self, session_id: str, jobs: Sequence[Tuple[str, str]]) -> None:
        queue: "asyncio.Queue[Optional[ArtifactEvent]]" = asyncio.Queue()
        merger = asyncio.create_task(self._merge(queue))
        try:
            # every task records its own failure, so gather never aborts early
            await asyncio.gather(*(self._run_task(session_id, aid, p, queue) for aid, p in jobs))
        finally:
            queue.put_nowait(None)
            await merger

    async def _run_task(
        self,
        session_id: str,
        artifact_id: str,
        prompt: str,
        queue: "asyncio.Queue[Optional[ArtifactEvent]]",
    ) -> None:
        def emit(kind: EventKind, text: str = "") -> None:
            queue.put_nowait(ArtifactEvent(session_id, artifact_id, kind, text))

        received: List[str] = []
        try:
            async for text in self.client.stream_generate(prompt, model=self.model):
                received.append(text)
                emit(EventKind.INCREMENT, text)
            final = strip_code_fences("".join(received))
            if not final:
                raise GenerationError("No HTML content received from API")
            emit(EventKind.COMPLETE, final)
        except Exception as e:
            logger.exception("generation failed for artifact %s", artifact_id)
            emit(EventKind.ERROR, _message(e))