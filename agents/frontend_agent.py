"""Frontend builder - markup, stylesheets and UI components."""

from agents.builder import BuilderAgent


class FrontendAgent(BuilderAgent):
    name = "frontend"
    description = "Builds HTML, CSS and UI component files"
    persona_prompt = "frontend"
