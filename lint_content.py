#!/usr/bin/env python3
"""Content quality gate for the timeline and the reveal message pool."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import re
from typing import Any


def normalize_message(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", " ", text.lower()).strip()


def message_duplicates(messages: list[Any]) -> list[str]:
    dups: list[str] = []
    seen: set[str] = set()
    for message in messages:
        key = normalize_message(str(message))
        if key in seen:
            dups.append(str(message))
        else:
            seen.add(key)
    return dups


def fix_duplicate_messages(data: dict[str, Any]) -> int:
    messages = data.get("messages", [])
    if not isinstance(messages, list):
        return 0
    unique: list[Any] = []
    seen: set[str] = set()
    for message in messages:
        key = normalize_message(str(message))
        if key in seen:
            continue
        seen.add(key)
        unique.append(message)
    data["messages"] = unique
    return len(messages) - len(unique)


def incomplete_entries(timeline: list[Any]) -> list[int]:
    """Indexes of timeline entries missing a title or text."""
    bad: list[int] = []
    for idx, entry in enumerate(timeline):
        if not isinstance(entry, dict):
            bad.append(idx)
            continue
        if not str(entry.get("title", "")).strip() or not str(entry.get("text", "")).strip():
            bad.append(idx)
    return bad


def long_messages(messages: list[Any], max_chars: int) -> list[str]:
    return [str(m) for m in messages if len(str(m)) > max_chars]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Lint narrative content constraints.")
    p.add_argument("--content", default="content.json", help="Path to content JSON.")
    p.add_argument("--max-message-chars", type=int, default=120)
    p.add_argument("--fix", action="store_true", help="Drop duplicate messages in place.")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    content_path = Path(args.content)
    if not content_path.exists():
        print(f"ERROR: content file not found: {content_path}")
        return 2

    try:
        data = json.loads(content_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        print(f"ERROR: invalid JSON in {content_path}: {exc}")
        return 2
    if not isinstance(data, dict):
        print(f"ERROR: content root must be an object: {content_path}")
        return 2

    if args.fix:
        removed = fix_duplicate_messages(data)
        if removed:
            content_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            print(f"FIXED: removed {removed} duplicate messages in {content_path}")

    timeline = data.get("timeline", [])
    messages = data.get("messages", [])
    if not isinstance(timeline, list):
        timeline = []
    if not isinstance(messages, list):
        messages = []

    failed = False
    if not timeline:
        failed = True
        print("FAIL: timeline is empty")
    else:
        print(f"PASS: timeline has {len(timeline)} entries")

    incomplete = incomplete_entries(timeline)
    if incomplete:
        failed = True
        print(f"FAIL: timeline entries missing title or text at {incomplete}")
    else:
        print("PASS: every timeline entry has a title and text")

    if not messages:
        failed = True
        print("FAIL: message pool is empty")
    else:
        print(f"PASS: message pool has {len(messages)} messages")

    duplicates = message_duplicates(messages)
    if duplicates:
        failed = True
        print(f"FAIL: duplicate messages detected ({len(duplicates)} total)")
    else:
        print("PASS: no duplicate messages")

    too_long = long_messages(messages, args.max_message_chars)
    if too_long:
        failed = True
        print(f"FAIL: {len(too_long)} messages exceed {args.max_message_chars} characters")
    else:
        print(f"PASS: all messages within {args.max_message_chars} characters")

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
