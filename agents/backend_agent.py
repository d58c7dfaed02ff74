"""Backend builder - the default persona for application code."""

from agents.builder import BuilderAgent


class BackendAgent(BuilderAgent):
    name = "backend"
    description = "Builds application logic, services, handlers and manifests"
    persona_prompt = "backend"
