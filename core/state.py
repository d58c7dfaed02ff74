"""Data models shared by the pipeline, the session layer and the surfaces."""

from __future__ import annotations

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class FileArtifact:
    name: str           # relative path e.g. "src/app.js"
    content: str


@dataclass(frozen=True)
class ProjectMemory:
    """Per-requester state. Replaced wholesale on every update."""

    last_prompt: str = ""
    last_artifacts: tuple[FileArtifact, ...] = ()
    last_plan: str | None = None


@dataclass(frozen=True)
class GenerationRequest:
    raw_prompt: str
    server_context: str = ""
    prior_state: ProjectMemory | None = None


@dataclass(frozen=True)
class PlanResult:
    overview_text: str
    file_list: tuple[str, ...]
    raw_text: str = ""  # full architect response, fed to every build call


@dataclass
class PipelineResult:
    files: list[FileArtifact]
    overview: str
    audit_notes: str = ""
    plan: PlanResult | None = None
    archive: bytes | None = None    # zip of files, set once packaging succeeds


def serialize_artifacts(artifacts):
    """Encode artifacts as the JSON text stored in the memory row."""
    return json.dumps([{"name": a.name, "content": a.content} for a in artifacts])


def deserialize_artifacts(text):
    """Decode stored artifact JSON. Unreadable or missing data yields ()."""
    if not text:
        return ()
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return ()
    if not isinstance(data, list):
        return ()
    artifacts = []
    for item in data:
        if isinstance(item, dict) and item.get("name") and item.get("content") is not None:
            artifacts.append(FileArtifact(name=str(item["name"]), content=str(item["content"])))
    return tuple(artifacts)
