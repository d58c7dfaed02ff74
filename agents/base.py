"""Base class for all prompt-driven agents."""

import os

_PROMPT_DIR = os.path.join(os.path.dirname(__file__), "prompts")


def load_prompt(name):
    """Read agents/prompts/<name>.txt."""
    with open(os.path.join(_PROMPT_DIR, f"{name}.txt")) as f:
        return f.read().strip()


class BaseAgent:
    """An agent is a system prompt bound to a generation service."""

    name = "base"
    description = "Base agent"
    prompt_name = ""  # each agent overrides with its prompts/<name>.txt

    def __init__(self, llm):
        self.llm = llm

    @property
    def system_prompt(self):
        return load_prompt(self.prompt_name)

    def _call_llm(self, user_message):
        """Send user_message with this agent's system prompt."""
        return self.llm.complete(self.system_prompt, user_message)
