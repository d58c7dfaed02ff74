"""Database builder - schemas, migrations and query files."""

from agents.builder import BuilderAgent


class DatabaseAgent(BuilderAgent):
    name = "database"
    description = "Builds SQL schemas, migrations and query files"
    persona_prompt = "database"
