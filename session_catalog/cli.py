#!/usr/bin/env python3
"""Command-line entry point for session-catalog.

Usage:
    session-catalog list claude
    session-catalog search --backend codex abc123
    session-catalog show codex ~/.codex/sessions/2025/01/02/rollout-x.jsonl
    session-catalog delete ~/.claude/projects/-home-me-proj/abc.jsonl
    session-catalog rules write style.md --file style.md --tag python --tag style
    session-catalog claude-rules read
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .backends import Backend
from .catalog import ConversationCatalog
from .config import CatalogSettings, CodexConfig
from .errors import CatalogError
from .rules import RuleStore, read_claude_rules, write_claude_rules

BACKEND_CHOICES = [b.value for b in Backend]


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _read_content(args: argparse.Namespace) -> str:
    if args.file is not None:
        return Path(args.file).read_text(encoding="utf-8")
    return sys.stdin.read()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="session-catalog",
        description="Browse and clean up Claude/Codex conversation logs and Codex rules",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        help="Custom settings file (default: ~/.session-catalog/settings.json)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="List conversations of one backend, newest first")
    p.add_argument("backend", choices=BACKEND_CHOICES)

    p = sub.add_parser("search", help="Search conversations by id, project or session id")
    p.add_argument("keyword", nargs="?", default="")
    p.add_argument("--backend", choices=BACKEND_CHOICES)

    p = sub.add_parser("show", help="Print the messages of a conversation")
    p.add_argument("backend", choices=BACKEND_CHOICES)
    p.add_argument("path", type=Path)
    p.add_argument("--raw", action="store_true", help="Print the raw JSONL instead")

    p = sub.add_parser("delete", help="Delete a conversation and prune empty directories")
    p.add_argument("path", type=Path)

    rules = sub.add_parser("rules", help="Manage Codex rule files").add_subparsers(
        dest="rules_command", required=True
    )
    rules.add_parser("list", help="List rule files with tags")
    p = rules.add_parser("read", help="Print a rule file")
    p.add_argument("name")
    p = rules.add_parser("write", help="Write a rule file (content from --file or stdin)")
    p.add_argument("name")
    p.add_argument("--file", type=Path)
    p.add_argument("--tag", dest="tags", action="append", default=[])
    p = rules.add_parser("delete", help="Delete a rule file and its config entry")
    p.add_argument("name")

    claude = sub.add_parser("claude-rules", help="Read or write CLAUDE.md").add_subparsers(
        dest="claude_command", required=True
    )
    claude.add_parser("read")
    p = claude.add_parser("write")
    p.add_argument("--file", type=Path)

    return parser


def run(args: argparse.Namespace) -> None:
    settings = CatalogSettings.load(args.settings)

    if args.command in ("list", "search", "show", "delete"):
        catalog = ConversationCatalog(settings)
        if args.command == "list":
            _print_json([m.to_json_dict() for m in catalog.list_conversations(args.backend)])
        elif args.command == "search":
            results = catalog.search_conversations(args.backend, args.keyword)
            _print_json([m.to_json_dict() for m in results])
        elif args.command == "show":
            if args.raw:
                print(catalog.get_conversation_content(args.path), end="")
            else:
                for message in catalog.get_conversation_messages(args.path, args.backend):
                    stamp = f" [{message.timestamp}]" if message.timestamp else ""
                    print(f"## {message.role}{stamp}\n{message.content}\n")
        else:
            catalog.delete_conversation(args.path)
        return

    if args.command == "rules":
        store = RuleStore(CodexConfig(settings))
        if args.rules_command == "list":
            _print_json([r.to_json_dict() for r in store.list_rules()])
        elif args.rules_command == "read":
            print(store.read_rule(args.name), end="")
        elif args.rules_command == "write":
            store.write_rule(args.name, _read_content(args), args.tags)
        else:
            store.delete_rule(args.name)
        return

    if args.claude_command == "read":
        print(read_claude_rules(settings), end="")
    else:
        write_claude_rules(_read_content(args), settings)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run(args)
    except (CatalogError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
