"""Swarm pipeline: plan -> per-file build loop -> audit.

Phases run strictly in order, each on the previous phase's text output.
Parsing problems never fail a run (see utils.plan_parser and
utils.file_blocks); generation-service errors propagate to the caller.
"""

import logging

import anthropic

from agents.auditor import AuditorAgent
from agents.backend_agent import BackendAgent
from agents.database_agent import DatabaseAgent
from agents.frontend_agent import FrontendAgent
from agents.planner import PlannerAgent
from agents.security import SecurityAgent
from config.defaults import DEFAULTS, PROGRESS
from core.state import GenerationRequest, PipelineResult
from manager.classifier import BACKEND, DATABASE, FRONTEND, SECURITY, classify_file
from utils.llm import ClaudeClient
from utils.time_anchor import temporal_anchor

logger = logging.getLogger(__name__)


def _no_progress(percent, label):
    pass


class Orchestrator:
    """Runs one generation request through the three phases.

    Args:
        llm: Generation service with complete(system_role, user_content).
        build_attempts: Attempts per build call. 1 (default) is fail-fast:
                        the first error aborts the run.
        audit_review: If True, the audit phase makes one advisory review
                      call; its findings land in PipelineResult.audit_notes.
        anchor: Zero-arg callable returning the temporal anchor string.
    """

    def __init__(self, llm=None, build_attempts=None, audit_review=None, anchor=None):
        self.llm = llm or ClaudeClient()
        self.build_attempts = max(1, build_attempts or DEFAULTS["build_attempts"])
        self.audit_review = DEFAULTS["audit_review"] if audit_review is None else audit_review
        self.anchor = anchor or temporal_anchor

        self.planner = PlannerAgent(self.llm)
        self.builders = {
            BACKEND: BackendAgent(self.llm),
            FRONTEND: FrontendAgent(self.llm),
            DATABASE: DatabaseAgent(self.llm),
            SECURITY: SecurityAgent(self.llm),
        }
        self.auditor = AuditorAgent(self.llm)

    def list_agents(self):
        """Return (name, description) for every persona in the swarm."""
        agents = [self.planner, *self.builders.values(), self.auditor]
        return [(a.name, a.description) for a in agents]

    def plan(self, request: GenerationRequest, progress=None):
        """Phase 1: one architect call. Errors propagate (nothing to build on)."""
        progress = progress or _no_progress
        progress(PROGRESS["plan_percent"], "[ARCHITECT]: Drafting master plan...")
        logger.info("Planning: %.80s", request.raw_prompt)
        plan = self.planner.run(request, self.anchor())
        logger.info("Plan has %d file(s): %s", len(plan.file_list), ", ".join(plan.file_list))
        return plan

    def build_file(self, plan, filename, context):
        """Build one planned file with its routed persona, retrying if configured."""
        persona = classify_file(filename)
        builder = self.builders[persona]
        logger.info("Building %s as %s", filename, persona)

        for attempt in range(1, self.build_attempts + 1):
            try:
                return builder.run(plan, filename, context, self.anchor())
            except anthropic.APIError as e:
                if attempt == self.build_attempts:
                    raise
                logger.warning("Build of %s failed (attempt %d/%d): %s",
                               filename, attempt, self.build_attempts, e)

    def run(self, request: GenerationRequest, progress=None) -> PipelineResult:
        """Run plan, build and audit. Returns all built artifacts and the overview."""
        progress = progress or _no_progress
        plan = self.plan(request, progress)

        # Phase 2: build loop
        files = []
        total = len(plan.file_list)
        for index, filename in enumerate(plan.file_list, 1):
            percent = PROGRESS["plan_percent"] + round(PROGRESS["build_band"] * index / total)
            progress(percent, f"[BUILDER]: Constructing {filename}...")
            files.extend(self.build_file(plan, filename, request.server_context))

        # Phase 3: audit (advisory only)
        progress(PROGRESS["audit_percent"], "[AUDITOR]: Final polish & security scan...")
        audit_notes = self.auditor.run(plan.overview_text, files) if self.audit_review else ""

        return PipelineResult(
            files=files,
            overview=plan.overview_text,
            audit_notes=audit_notes,
            plan=plan,
        )
