"""Shared test doubles: a scripted generation service and a dict-backed store."""

import anthropic
import httpx
import pytest

from core.memory import ProjectMemoryStore


class ScriptedLLM:
    """Returns canned responses in order and records every call.

    A response that is an Exception instance is raised instead of returned.
    """

    model = "scripted-model"

    def __init__(self, responses=()):
        self.responses = list(responses)
        self.calls = []

    def complete(self, system_role, user_content):
        self.calls.append((system_role, user_content))
        if not self.responses:
            raise AssertionError("ScriptedLLM ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class DictStore:
    """In-memory stand-in for ProjectMemoryStore."""

    backend = "memory"

    def __init__(self, rows=None):
        self.rows = dict(rows or {})
        self.puts = []

    def get(self, requester_id):
        return self.rows.get(str(requester_id))

    def put(self, requester_id, memory):
        self.rows[str(requester_id)] = memory
        self.puts.append((str(requester_id), memory))


def api_timeout():
    return anthropic.APITimeoutError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))


def file_block(name, content):
    return f"[FILE_START:{name}]\n{content}\n[FILE_END]"


PLAN_TODO = '[OVERVIEW_START]Build a todo app[OVERVIEW_END][FILE_LIST: ["index.js","package.json"]]'


@pytest.fixture
def sqlite_store(tmp_path):
    return ProjectMemoryStore(f"sqlite:///{tmp_path / 'ghost.db'}")
