"""Tests for core.session - spawn / tweak / brainstorm memory protocols."""

import json
import threading
import time
import zipfile
import io
from unittest.mock import MagicMock

import anthropic
import pytest

from conftest import PLAN_TODO, DictStore, ScriptedLLM, api_timeout, file_block
from core.orchestrator import Orchestrator
from core.session import EmptyInputError, GhostSession, NoProjectError, tweak_prompt
from core.state import FileArtifact, PipelineResult, ProjectMemory
from utils.archive import ArchiveError


def _session(responses, store=None):
    llm = ScriptedLLM(responses)
    orch = Orchestrator(llm, audit_review=False, anchor=lambda: "ANCHOR")
    return GhostSession(orch, store if store is not None else DictStore()), llm


TODO_BUILD = [PLAN_TODO, file_block("index.js", "app()"), file_block("package.json", "{}")]
EXISTING = ProjectMemory(
    last_prompt="todo app",
    last_artifacts=(FileArtifact("index.js", "app()"),),
    last_plan="Standing plan",
)


# --- spawn ---

def test_spawn_stores_memory():
    session, _ = _session(TODO_BUILD)
    result = session.spawn("u1", "todo app")

    memory = session.store.get("u1")
    assert memory.last_prompt == "todo app"
    assert memory.last_artifacts == tuple(result.files)
    assert memory.last_plan is None


def test_spawn_packs_archive():
    session, _ = _session(TODO_BUILD)
    result = session.spawn("u1", "todo app")
    with zipfile.ZipFile(io.BytesIO(result.archive)) as zf:
        assert sorted(zf.namelist()) == ["index.js", "package.json"]


def test_spawn_keeps_standing_plan_and_uses_it():
    store = DictStore({"u1": ProjectMemory(last_plan="Use Express")})
    session, llm = _session(TODO_BUILD, store)
    session.spawn("u1", "build it")

    assert store.get("u1").last_plan == "Use Express"
    assert "APPROVED PLAN" in llm.calls[0][1]


def test_spawn_empty_prompt_makes_no_call():
    session, llm = _session([])
    with pytest.raises(EmptyInputError):
        session.spawn("u1", "   ")
    assert llm.calls == []
    assert session.store.puts == []


def test_spawn_failure_leaves_memory_untouched():
    store = DictStore({"u1": EXISTING})
    session, _ = _session([PLAN_TODO, api_timeout()], store)
    with pytest.raises(anthropic.APIError):
        session.spawn("u1", "new thing")
    assert store.get("u1") == EXISTING
    assert store.puts == []


def test_archive_failure_leaves_memory_untouched():
    store = DictStore({"u1": EXISTING})
    session, _ = _session(['[FILE_LIST: ["../evil.py"]]', file_block("../evil.py", "x")], store)
    with pytest.raises(ArchiveError):
        session.spawn("u1", "escape")
    assert store.puts == []


# --- tweak ---

def test_tweak_without_memory_makes_no_call():
    session, llm = _session([])
    with pytest.raises(NoProjectError):
        session.tweak("nobody", "add logging")
    assert llm.calls == []
    assert session.store.puts == []


def test_tweak_with_brainstorm_only_memory_is_rejected():
    store = DictStore({"u1": ProjectMemory(last_plan="ideas")})
    session, llm = _session([], store)
    with pytest.raises(NoProjectError):
        session.tweak("u1", "add logging")
    assert llm.calls == []


def test_tweak_empty_instruction():
    store = DictStore({"u1": EXISTING})
    session, llm = _session([], store)
    with pytest.raises(EmptyInputError):
        session.tweak("u1", "")
    assert llm.calls == []


def test_tweak_prompt_embeds_previous_artifacts():
    store = DictStore({"u1": EXISTING})
    session, llm = _session(
        ['[FILE_LIST: ["index.js"]]', file_block("index.js", "app(); log()")], store,
    )
    session.tweak("u1", "add logging")

    _, user = llm.calls[0]
    assert "add logging" in user
    assert json.dumps([{"name": "index.js", "content": "app()"}]) in user


def test_tweak_replaces_artifacts_and_prompt_keeps_plan():
    store = DictStore({"u1": EXISTING})
    session, _ = _session(
        ['[FILE_LIST: ["index.js"]]', file_block("index.js", "app(); log()")], store,
    )
    session.tweak("u1", "add logging")

    memory = store.get("u1")
    assert memory.last_prompt == "add logging"
    assert memory.last_artifacts == (FileArtifact("index.js", "app(); log()"),)
    assert memory.last_plan == "Standing plan"


def test_tweak_prompt_format():
    text = tweak_prompt("use TypeScript", EXISTING)
    assert text.startswith("TWEAK PREVIOUS PROJECT. Apply these changes: use TypeScript.")
    assert "PREVIOUS STATE: " in text


# --- brainstorm ---

def test_brainstorm_replaces_plan_only():
    store = DictStore({"u1": EXISTING})
    session, llm = _session(["  New plan: add reminders  "], store)
    plan = session.brainstorm("u1", "what about reminders?")

    assert plan == "New plan: add reminders"
    memory = store.get("u1")
    assert memory.last_plan == "New plan: add reminders"
    assert memory.last_prompt == EXISTING.last_prompt
    assert memory.last_artifacts == EXISTING.last_artifacts
    system, user = llm.calls[0]
    assert "GHOST-CONSULTANT" in system
    assert "PREVIOUS PLAN: Standing plan" in user


def test_brainstorm_creates_memory_for_new_requester():
    session, llm = _session(["Plan A"])
    session.brainstorm("new", "a discord bot?")

    assert session.store.get("new") == ProjectMemory(last_plan="Plan A")
    assert "PREVIOUS PLAN: No previous plan." in llm.calls[0][1]


def test_brainstorm_empty_query():
    session, llm = _session([])
    with pytest.raises(EmptyInputError):
        session.brainstorm("u1", "")
    assert llm.calls == []


# --- serialization per requester ---

def test_same_requester_commands_do_not_overlap():
    active = []
    overlaps = []

    def slow_run(request, progress=None):
        active.append(1)
        if len(active) > 1:
            overlaps.append(True)
        time.sleep(0.05)
        active.pop()
        return PipelineResult(files=[FileArtifact("a.py", "x")], overview="o")

    orch = MagicMock()
    orch.llm = ScriptedLLM()
    orch.run.side_effect = slow_run
    session = GhostSession(orch, DictStore())

    threads = [threading.Thread(target=session.spawn, args=("u1", f"p{i}")) for i in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlaps == []
    assert orch.run.call_count == 3
