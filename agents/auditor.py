"""Auditor agent - advisory review of a finished build."""

import logging

import anthropic

from agents.base import BaseAgent
from utils.llm import MissingApiKeyError

logger = logging.getLogger(__name__)

# Per-file cap on content sent for review
_MAX_FILE_CHARS = 6000


class AuditorAgent(BaseAgent):
    """Reviews built files and returns findings as text.

    Never changes files, and never raises: a failed review returns "" so it
    cannot block delivery.
    """

    name = "auditor"
    description = "Reviews the finished project for correctness and security"
    prompt_name = "auditor"

    def run(self, overview, files):
        if not files:
            return ""

        parts = [f"OVERVIEW:\n{overview}\n", "FILES:\n"]
        for f in files:
            content = f.content
            if len(content) > _MAX_FILE_CHARS:
                content = content[:_MAX_FILE_CHARS] + "\n... (truncated)"
            parts.append(f"[FILE_START:{f.name}]\n{content}\n[FILE_END]\n")

        try:
            return self._call_llm("\n".join(parts)).strip()
        except (anthropic.APIError, MissingApiKeyError) as e:
            logger.warning("Audit review failed, delivering without it: %s", e)
            return ""
