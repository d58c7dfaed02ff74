"""Security builder - authentication, token signing and encryption files."""

from agents.builder import BuilderAgent


class SecurityAgent(BuilderAgent):
    """Hardening persona for any file whose name mentions auth, tokens or crypto."""

    name = "security"
    description = "Builds authentication, token-signing and encryption code"
    persona_prompt = "security"
