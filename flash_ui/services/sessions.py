# session records and the process-wide session arena
# records are frozen; every change replaces the session entry with a new copy keyed by id

import html
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

COMMON_CAUSES = (
    "API key not configured (check your .env file)",
    "Network connection issues",
    "API rate limits exceeded",
    "Server not running (check API_BASE_URL)",
)


class ArtifactStatus(str, Enum):
    STREAMING = "streaming"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class Artifact:
    id: str
    label: str
    text: str = ""              # every increment received so far, concatenated in arrival order
    status: ArtifactStatus = ArtifactStatus.STREAMING
    html: str = ""              # final fence-stripped content once complete
    diagnostic: str = ""        # rendered error panel once failed

    @property
    def is_terminal(self) -> bool:
        return self.status is not ArtifactStatus.STREAMING


@dataclass(frozen=True)
class Session:
    id: str
    prompt: str
    created_at: float
    artifacts: Tuple[Artifact, ...]

    def artifact(self, artifact_id: str) -> Optional[Artifact]:
        for a in self.artifacts:
            if a.id == artifact_id:
                return a
        return None


@dataclass(frozen=True)
class StyleReference:
    label: str
    html: str


def new_session(prompt: str, labels: Sequence[str]) -> Session:
    session_id = uuid4().hex
    artifacts = tuple(Artifact(id=f"{session_id}_{i}", label=label) for i, label in enumerate(labels))
    return Session(id=session_id, prompt=prompt, created_at=time.time(), artifacts=artifacts)


def render_error_panel(message: str, causes: Sequence[str] = COMMON_CAUSES) -> str:
    items = "".join(f"<li>{html.escape(c)}</li>" for c in causes)
    return (
        '<div class="generation-error">'
        "<h3>Design Generation Failed</h3>"
        f"<p>{html.escape(message)}</p>"
        f"<p>Common causes:</p><ul>{items}</ul>"
        "</div>"
    )


class SessionStore:
    """Arena of sessions addressed by id, plus the active-session pointer.

    Only accessed from the event loop thread, so no lock.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._order: List[str] = []
        self._active_id: Optional[str] = None

    def add(self, session: Session) -> None:
        self._sessions[session.id] = session
        self._order.append(session.id)
        self._active_id = session.id

    def get(self, session_id: str) -> Session:
        return self._sessions[session_id]

    def list(self) -> List[Session]:
        return [self._sessions[sid] for sid in self._order]

    @property
    def active(self) -> Optional[Session]:
        if self._active_id is None:
            return None
        return self._sessions[self._active_id]

    def activate(self, session_id: str) -> None:
        if session_id not in self._sessions:
            raise KeyError(session_id)
        self._active_id = session_id

    def update_artifact(
        self,
        session_id: str,
        artifact_id: str,
        change: Callable[[Artifact], Artifact],
    ) -> Artifact:
        session = self._sessions[session_id]
        updated: Optional[Artifact] = None
        artifacts = []
        for a in session.artifacts:
            if a.id == artifact_id:
                updated = change(a)
                artifacts.append(updated)
            else:
                artifacts.append(a)
        if updated is None:
            raise KeyError(artifact_id)
        self._sessions[session_id] = replace(session, artifacts=tuple(artifacts))
        return updated
