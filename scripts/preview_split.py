#!/usr/bin/env python3
"""
Preview how an article body would be split before running a migration.

Reads an HTML file, splits it with the same limit the migration uses and
writes each part to the output directory as ``part-<n>.html``.  Warnings
raised by the splitter are printed.

Usage:
  python scripts/preview_split.py \\
    --input data/article.html \\
    --max-chars 240000 \\
    --output data/parts
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from blog_migrator.parsers.html_splitter import OVERSIZE_POLICIES, SplitWarning, split_html


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Split an HTML body into size-limited parts.")
    parser.add_argument("--input", required=True, help="HTML file to split")
    parser.add_argument("--max-chars", type=int, default=240000, help="Character limit per part")
    parser.add_argument("--policy", choices=OVERSIZE_POLICIES, default="pass", help="Handling of oversized elements")
    parser.add_argument("--output", default="data/parts", help="Directory for the part files")
    return parser.parse_args()


def write_parts(parts: List[str], out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    for index, part in enumerate(parts, start=1):
        (out_dir / f"part-{index}.html").write_text(part, encoding="utf-8")


def main() -> None:
    args = parse_args()
    in_path = Path(args.input)
    if not in_path.exists():
        raise SystemExit(f"Input file not found: {in_path}")

    def on_warning(warning: SplitWarning) -> None:
        print(f"[WARNING] {warning}")

    html = in_path.read_text(encoding="utf-8")
    parts = split_html(html, args.max_chars, on_warning=on_warning, oversize_policy=args.policy)
    write_parts(parts, Path(args.output))

    for index, part in enumerate(parts, start=1):
        print(f"part {index}: {len(part)} chars")
    print(f"Parts written to: {args.output}")


if __name__ == "__main__":
    main()
