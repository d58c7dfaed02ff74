"""Planner agent - turns a request into an overview and a file list."""

from agents.base import BaseAgent
from core.state import GenerationRequest, PlanResult
from utils.plan_parser import extract_plan


def compose_request_text(request: GenerationRequest):
    """The user's request, prefixed with the standing plan when one exists."""
    prior = request.prior_state
    if prior and prior.last_plan:
        return f"APPROVED PLAN (continue from this):\n{prior.last_plan}\n\nREQUEST: {request.raw_prompt}"
    return f"REQUEST: {request.raw_prompt}"


class PlannerAgent(BaseAgent):
    """Architect persona. One LLM call per pipeline run."""

    name = "architect"
    description = "Drafts the master plan: project overview + ordered file list"
    prompt_name = "planner"

    def run(self, request: GenerationRequest, anchor) -> PlanResult:
        user_message = (
            f"{compose_request_text(request)}\n"
            f"CONTEXT: {request.server_context}\n"
            f"ANCHOR: {anchor}"
        )
        response = self._call_llm(user_message)
        return extract_plan(response)
