#!/usr/bin/env python3
"""GhostCoder - multi-agent project generator, command-line surface.

Usage:
    python main.py spawn --prompt "discord bot with a ticket system"
    python main.py tweak --instruction "add a /close command"
    python main.py brainstorm --query "what should a moderation bot do?"
    python main.py spawn --prompt "..." --server-file guild.json --out project.zip
    python main.py help
    python main.py dashboard
"""

import argparse
import json
import logging
import sys

from config.defaults import DEFAULTS
from core.memory import ProjectMemoryStore
from core.orchestrator import Orchestrator
from core.session import GhostSession
from manager.agent import CommandManager
from utils.llm import ClaudeClient


def _print_progress(percent, label):
    filled = percent // 10
    print(f"[{'#' * filled}{'.' * (10 - filled)}] {percent:3d}% - {label}")


def _load_server(path):
    if not path:
        return None
    with open(path) as f:
        return json.load(f)


def build_manager(args):
    llm = ClaudeClient(model=args.model, timeout=args.timeout)
    orchestrator = Orchestrator(llm, build_attempts=args.attempts, audit_review=args.audit)
    store = ProjectMemoryStore(args.database)
    return CommandManager(GhostSession(orchestrator, store))


def run_command(args):
    manager = build_manager(args)
    text = " ".join(
        part for part in (manager.prefix + args.command, args.text or "") if part
    )
    reply = manager.handle(args.user, text, server=_load_server(args.server_file),
                           progress=_print_progress)

    print()
    print(reply.text)

    if reply.archive is not None:
        out = args.out or reply.archive_name
        with open(out, "wb") as f:
            f.write(reply.archive)
        print(f"\nProject archive written to {out}")

    return 1 if reply.kind == "error" else 0


def main():
    parser = argparse.ArgumentParser(
        prog="ghostcoder",
        description="Multi-agent project generator",
    )
    parser.add_argument("--user", default="local", help="Requester id for project memory (default: local)")
    parser.add_argument("--database", default=DEFAULTS["database_url"], help="SQLAlchemy database URL")
    parser.add_argument("--model", default=DEFAULTS["model"], help="Claude model id")
    parser.add_argument("--timeout", type=float, default=DEFAULTS["request_timeout"],
                        help="Seconds allowed per generation call")
    parser.add_argument("--attempts", type=int, default=DEFAULTS["build_attempts"],
                        help="Attempts per file build (default: 1, fail-fast)")
    parser.add_argument("--audit", action="store_true", default=DEFAULTS["audit_review"],
                        help="Run an advisory review call after the build")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline details")
    subparsers = parser.add_subparsers(dest="command")

    spawn_parser = subparsers.add_parser("spawn", help="Generate a new project")
    spawn_parser.add_argument("--prompt", dest="text", required=True, help="Natural language request")

    tweak_parser = subparsers.add_parser("tweak", help="Modify the last generated project")
    tweak_parser.add_argument("--instruction", dest="text", required=True, help="What to change")

    brainstorm_parser = subparsers.add_parser("brainstorm", help="Discuss a plan before building")
    brainstorm_parser.add_argument("--query", dest="text", required=True, help="Question or idea")

    subparsers.add_parser("help", help="List bot commands")
    subparsers.add_parser("dashboard", help="Show system status")

    for sub in (spawn_parser, tweak_parser, brainstorm_parser):
        sub.add_argument("--server-file", help="JSON file describing the chat server (channels, roles)")
        sub.add_argument("--out", help="Where to write the project zip")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    for attr in ("text", "server_file", "out"):
        if not hasattr(args, attr):
            setattr(args, attr, None)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(run_command(args))


if __name__ == "__main__":
    main()
