"""Builder agent - writes one planned file per LLM call."""

import logging

from agents.base import BaseAgent, load_prompt
from core.state import FileArtifact, PlanResult
from utils.file_blocks import clean_name, parse_files

logger = logging.getLogger(__name__)


class BuilderAgent(BaseAgent):
    """Shared builder rules plus a persona-specific role paragraph."""

    name = "builder"
    description = "Writes a single planned file"
    prompt_name = "builder"
    persona_prompt = ""

    @property
    def system_prompt(self):
        prompt = load_prompt(self.prompt_name)
        if self.persona_prompt:
            prompt += "\n\n" + load_prompt(self.persona_prompt)
        return prompt

    def run(self, plan: PlanResult, filename, context, anchor):
        """Build filename. Always returns at least one artifact.

        When the response has no file blocks, the whole raw response becomes
        the content of a single artifact named after the requested file.
        """
        user_message = (
            f"MASTER PLAN: {plan.raw_text}\n"
            f"BUILD FILE: {filename}\n"
            f"CONTEXT: {context}\n"
            f"ANCHOR: {anchor}\n"
            f"TASK: Write the FULL code for {filename}."
        )
        response = self._call_llm(user_message)
        files = parse_files(response)
        if files:
            return files

        logger.warning("No file blocks in builder output for %s, keeping raw response", filename)
        return [FileArtifact(name=clean_name(filename) or filename, content=response)]
