#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from collections import Counter, defaultdict
from datetime import datetime, timezone
from pathlib import Path

DISABLED_KIND = "auto_disable_connection"
WARNING_KIND = "auto_disable_connection_warning"


def main() -> None:
    parser = argparse.ArgumentParser(description="Summarize auto-disable notifications for a day")
    parser.add_argument("--input", default="runs/notifications/notifications.jsonl")
    parser.add_argument("--date", default=datetime.now(timezone.utc).strftime("%Y-%m-%d"))
    parser.add_argument("--out", default="")
    args = parser.parse_args()

    rows = load_rows(Path(args.input), args.date)
    if not rows:
        print(f"No notifications found for {args.date}")
        return

    report = build_report(args.date, rows)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(report, encoding="utf-8")
        print(f"Wrote {out_path}")
    else:
        print(report)


def load_rows(path: Path, day: str) -> list[dict]:
    rows: list[dict] = []
    if not path.exists():
        return rows
    with path.open("r", encoding="utf-8") as fp:
        for line in fp:
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not str(raw.get("ts", "")).startswith(day):
                continue
            rows.append(raw)
    return rows


def build_report(day: str, rows: list[dict]) -> str:
    kinds = Counter(row.get("kind", "") for row in rows)
    per_connection: dict[str, Counter] = defaultdict(Counter)
    for row in rows:
        per_connection[row.get("connection_id", "")][row.get("kind", "")] += 1

    lines = [
        f"# Auto-disable notifications {day}",
        "",
        "## Totals",
        f"- disabled: {kinds.get(DISABLED_KIND, 0)}",
        f"- warnings: {kinds.get(WARNING_KIND, 0)}",
        f"- connections: {len(per_connection)}",
        "",
        "## Connections",
    ]
    for connection_id in sorted(per_connection):
        counts = per_connection[connection_id]
        lines.append(
            f"- {connection_id}: disabled={counts.get(DISABLED_KIND, 0)} "
            f"warnings={counts.get(WARNING_KIND, 0)}"
        )
    return "\n".join(lines)


if __name__ == "__main__":
    main()
