"""Command manager - parses chat messages and delegates to the session protocols.

This is the one place errors are turned into replies. Input problems become
usage hints; generation, packaging and storage failures become an error reply with
the underlying message. Stored state is never touched on failure.
"""

import logging
from dataclasses import dataclass, field

import anthropic
from sqlalchemy.exc import SQLAlchemyError

from config.defaults import DEFAULTS, PROGRESS
from core.session import SessionError
from utils.archive import ArchiveError
from utils.context import describe_server
from utils.llm import MissingApiKeyError

logger = logging.getLogger(__name__)

NEW_PROJECT = "new_project"
TWEAK_LAST = "tweak_last"
TWEAK_HELP = "tweak_help"


@dataclass
class Reply:
    text: str
    kind: str = "ok"                    # ok | usage | error
    archive: bytes | None = None
    archive_name: str = ""
    buttons: list[str] = field(default_factory=list)


class CommandManager:
    """Routes `<prefix>command args` messages; unprefixed text is plain chat."""

    def __init__(self, session, prefix=None):
        self.session = session
        self.prefix = prefix or DEFAULTS["prefix"]
        self.commands = {
            "spawn": self.spawn,
            "tweak": self.tweak,
            "brainstorm": self.brainstorm,
            "chat": self.brainstorm,
            "help": self.help,
            "commands": self.help,
            "dashboard": self.dashboard,
            "ghost": self.dashboard,
        }

    def parse(self, message):
        """Return (command, args). Unprefixed messages map to ("chat", message)."""
        message = (message or "").strip()
        if not message.startswith(self.prefix):
            return "chat", message
        parts = message[len(self.prefix):].strip().split(None, 1)
        if not parts:
            return "help", ""
        return parts[0].lower(), parts[1].strip() if len(parts) > 1 else ""

    def handle(self, requester_id, message, server=None, progress=None):
        command, args = self.parse(message)
        handler = self.commands.get(command)
        if handler is None:
            return Reply(f"Unknown command `{command}`. Try `{self.prefix}help`.", kind="usage")

        logger.info("%s -> %s", requester_id, command)
        try:
            return handler(requester_id, args, server, progress)
        except SessionError as e:
            return Reply(str(e), kind="usage")
        except (anthropic.APIError, MissingApiKeyError, ArchiveError, SQLAlchemyError) as e:
            logger.exception("%s failed for %s", command, requester_id)
            return Reply(f"Error: {e}", kind="error")

    def _deliver(self, result, title, archive_name, progress):
        if progress:
            progress(PROGRESS["done_percent"], "Mission successful!")

        limit = DEFAULTS["overview_preview"]
        overview = result.overview
        if len(overview) > limit:
            overview = overview[:limit] + "..."
        text = f"**{title}**\n\n{overview}"
        if result.audit_notes:
            text += f"\n\n**Audit notes**\n{result.audit_notes}"
        return Reply(text, archive=result.archive, archive_name=archive_name,
                     buttons=[NEW_PROJECT, TWEAK_LAST])

    def spawn(self, requester_id, args, server=None, progress=None):
        if progress:
            progress(PROGRESS["start_percent"], "Initializing swarm...")
        result = self.session.spawn(requester_id, args, describe_server(server), progress)
        return self._deliver(result, "BUILD COMPLETE", "ghost_project.zip", progress)

    def tweak(self, requester_id, args, server=None, progress=None):
        if progress:
            progress(PROGRESS["start_percent"], "Re-syncing swarm...")
        result = self.session.tweak(requester_id, args, describe_server(server), progress)
        return self._deliver(result, "TWEAK DEPLOYED", "tweak_project.zip", progress)

    def brainstorm(self, requester_id, args, server=None, progress=None):
        plan = self.session.brainstorm(requester_id, args, describe_server(server))
        return Reply(plan, buttons=[NEW_PROJECT])

    def help(self, requester_id=None, args="", server=None, progress=None):
        p = self.prefix
        lines = [
            "**GHOST-CODER COMMANDS**",
            f"`{p}spawn <prompt>` - Generate a new multi-file project (delivered as a zip).",
            f"`{p}tweak <instructions>` - Modify your last generated project.",
            f"`{p}brainstorm <query>` / `{p}chat <query>` - Discuss and refine a plan before building.",
            f"`{p}dashboard` - Show system status.",
            f"`{p}help` - Show this list.",
            "Messages without the prefix are treated as chat.",
        ]
        return Reply("\n".join(lines))

    def dashboard(self, requester_id=None, args="", server=None, progress=None):
        orchestrator = self.session.orchestrator
        model = getattr(orchestrator.llm, "model", "custom")
        lines = [
            "**GHOST-CODER DASHBOARD**",
            "STATUS: OPERATIONAL",
            f"CORE: {model}",
            f"DATABASE: {self.session.store.backend}",
            "PERSISTENCE: active (project memory)",
            "AGENTS: " + ", ".join(name for name, _ in orchestrator.list_agents()),
        ]
        return Reply("\n".join(lines), buttons=[NEW_PROJECT, TWEAK_LAST])

    def handle_button(self, custom_id):
        """Hint text for dashboard/result buttons."""
        p = self.prefix
        hints = {
            NEW_PROJECT: f"Start a new project with `{p}spawn <your prompt>`.",
            TWEAK_LAST: f"Modify your last project with `{p}tweak <instructions>`.",
            TWEAK_HELP: (
                "Tweak examples:\n"
                f"1. `{p}tweak add a logger to all events`\n"
                f"2. `{p}tweak change language to python`\n"
                f"3. `{p}tweak fix the token error`"
            ),
        }
        if custom_id not in hints:
            return Reply(f"Unknown button `{custom_id}`.", kind="usage")
        return Reply(hints[custom_id])
