"""
JSON report of a grouping run.

The report lists every group with its members and average similarity, the
images that could not be fingerprinted, and the run summary.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from ..grouping.engine import GroupingResult
from ..logging import get_logger

logger = get_logger(__name__)

REPORT_VERSION = "1.0"


def build_report(result: GroupingResult, source: str) -> Dict[str, Any]:
    """Convert *result* into a JSON-serialisable dictionary."""
    return {
        "version": REPORT_VERSION,
        "source": source,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "summary": result.summary(),
        "groups": [
            {
                "group_id": group.group_id,
                "canonical_id": group.canonical_id,
                "average_similarity": round(group.average_similarity, 6),
                "image_ids": list(group.image_ids),
            }
            for group in result.groups
        ],
        "failures": [
            {"image_id": image_id, "reason": reason}
            for image_id, reason in result.partial_failures
        ],
    }


def write_report(result: GroupingResult, path: Path, source: str = "") -> Path:
    """Write the report for *result* to *path*, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    report = build_report(result, source)
    path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Wrote report with {len(report['groups'])} groups to {path}")
    return path
