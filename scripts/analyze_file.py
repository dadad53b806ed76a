#!/usr/bin/env python3
"""
analyze_file.py — Analyse a local media file and write the text report.

Usage (from the repo root, after `pip install -e .`):
    # Kind is inferred from the file extension
    python scripts/analyze_file.py samples/clip.mp4

    # Force the kind, write the report somewhere else
    python scripts/analyze_file.py recording.wav --kind audio --out-dir /tmp

    # Real classifier instead of the canned mock score
    AI_MOCK_MODE=false python scripts/analyze_file.py photo.jpg

Writes deepfake-analysis-<epoch millis>.txt (same layout as the API's
/api/v1/reports/download) into --out-dir and prints the summary.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from mediawatchdog.models.analysis import MediaKind
from mediawatchdog.services.media_validation import (
    ALLOWED_MIME_TYPES,
    is_allowed_mime,
    mime_from_filename,
)
from mediawatchdog.services.report_builder import build_report, report_filename
from mediawatchdog.services.score_generator import score_generator


def _infer_kind(path: Path) -> MediaKind | None:
    mime = mime_from_filename(path.name)
    for kind in ALLOWED_MIME_TYPES:
        if is_allowed_mime(kind, mime):
            return kind
    return None


async def run(path: Path, kind: MediaKind, out_dir: Path, force_authentic: bool) -> Path:
    data = path.read_bytes()
    result = await score_generator.generate(kind, path.name, data, force_authentic=force_authentic)

    out_dir.mkdir(parents=True, exist_ok=True)
    report_path = out_dir / report_filename()
    report_path.write_text(build_report(result), encoding="utf-8")

    print(f"{result.overall_result}")
    print(f"  Authenticity:     {result.base_metrics.authenticity:.1f}%")
    print(f"  Manipulation:     {result.base_metrics.manipulation_probability:.1f}%")
    print(f"  Confidence range: {result.confidence_interval}")
    print(f"\n✓ Report written to {report_path}")
    return report_path


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Analyse a media file and write the text report")
    parser.add_argument("file", type=Path, help="Image, video or audio file")
    parser.add_argument(
        "--kind",
        choices=[k.value for k in MediaKind],
        help="Media kind (default: inferred from the extension)",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("."),
        help="Directory for the report file (default: current directory)",
    )
    parser.add_argument(
        "--force-authentic",
        action="store_true",
        help="Treat the file like a webcam capture",
    )
    args = parser.parse_args()

    if not args.file.is_file():
        print(f"ERROR: {args.file} is not a file")
        sys.exit(1)

    kind = MediaKind(args.kind) if args.kind else _infer_kind(args.file)
    if kind is None:
        print(f"ERROR: cannot infer media kind for {args.file.name}; pass --kind")
        sys.exit(1)

    asyncio.run(run(args.file, kind, args.out_dir, args.force_authentic))
