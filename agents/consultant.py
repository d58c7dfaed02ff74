"""Consultant agent - brainstorming before a build."""

from agents.base import BaseAgent

NO_PREVIOUS_PLAN = "No previous plan."


class ConsultantAgent(BaseAgent):
    """Advisory persona for the brainstorm/chat exchange. One LLM call."""

    name = "consultant"
    description = "Discusses and refines the plan before anything is built"
    prompt_name = "consultant"

    def run(self, query, last_plan, context, anchor):
        user_message = (
            f"PREVIOUS PLAN: {last_plan or NO_PREVIOUS_PLAN}\n"
            f"NEW QUERY: {query}\n"
            f"CONTEXT: {context}\n"
            f"ANCHOR: {anchor}"
        )
        return self._call_llm(user_message).strip()
