"""Spawn, tweak and brainstorm protocols over project memory.

Memory is read before a run and written only after the run and its archive
both succeed, so a failed run leaves the stored state exactly as it was.
"""

import logging
from dataclasses import replace

from agents.consultant import ConsultantAgent
from core.memory import RequesterLocks
from core.state import GenerationRequest, ProjectMemory, serialize_artifacts
from utils.archive import build_archive

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """A user-facing precondition failure. No generation call was made."""


class EmptyInputError(SessionError):
    pass


class NoProjectError(SessionError):
    pass


def tweak_prompt(instruction, previous):
    """The synthesized prompt that rebuilds a project with changes applied."""
    return (
        f"TWEAK PREVIOUS PROJECT. Apply these changes: {instruction}. "
        f"PREVIOUS STATE: {serialize_artifacts(previous.last_artifacts)}"
    )


class GhostSession:
    """Binds the pipeline, the consultant and the store for each requester.

    Commands from the same requester are serialized; different requesters
    run independently.
    """

    def __init__(self, orchestrator, store, locks=None):
        self.orchestrator = orchestrator
        self.store = store
        self.locks = locks or RequesterLocks()
        self.consultant = ConsultantAgent(orchestrator.llm)

    def spawn(self, requester_id, prompt, context="", progress=None):
        """Build a new project. Keeps the standing plan, replaces everything else."""
        prompt = (prompt or "").strip()
        if not prompt:
            raise EmptyInputError("Tell me what to build: `spawn <prompt>`")

        with self.locks.hold(requester_id):
            prior = self.store.get(requester_id)
            request = GenerationRequest(raw_prompt=prompt, server_context=context, prior_state=prior)
            result = self.orchestrator.run(request, progress)
            result.archive = build_archive(result.files)
            self.store.put(requester_id, ProjectMemory(
                last_prompt=prompt,
                last_artifacts=tuple(result.files),
                last_plan=prior.last_plan if prior else None,
            ))
            logger.info("Stored spawn for %s: %d file(s)", requester_id, len(result.files))
        return result

    def tweak(self, requester_id, instruction, context="", progress=None):
        """Rebuild the stored project with instruction applied."""
        instruction = (instruction or "").strip()
        with self.locks.hold(requester_id):
            prior = self.store.get(requester_id)
            if prior is None or not prior.last_artifacts:
                raise NoProjectError("Nothing to tweak yet. Build something first with `spawn <prompt>`.")
            if not instruction:
                raise EmptyInputError("What should change? `tweak <instruction>`")

            request = GenerationRequest(
                raw_prompt=tweak_prompt(instruction, prior),
                server_context=context,
                prior_state=prior,
            )
            result = self.orchestrator.run(request, progress)
            result.archive = build_archive(result.files)
            self.store.put(requester_id, replace(
                prior, last_prompt=instruction, last_artifacts=tuple(result.files),
            ))
            logger.info("Stored tweak for %s: %d file(s)", requester_id, len(result.files))
        return result

    def brainstorm(self, requester_id, query, context=""):
        """One consultant call. Replaces only last_plan; returns the new plan text."""
        query = (query or "").strip()
        if not query:
            raise EmptyInputError("What do you want to discuss? `brainstorm <query>`")

        with self.locks.hold(requester_id):
            prior = self.store.get(requester_id) or ProjectMemory()
            plan = self.consultant.run(query, prior.last_plan, context, self.orchestrator.anchor())
            self.store.put(requester_id, replace(prior, last_plan=plan))
        return plan
