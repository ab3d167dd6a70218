"""logger — JSONL scan telemetry.

When ``logging.enabled`` is set in ``.importgate.yaml``, every scan appends
one JSON line to ``importgate_scans.jsonl`` in the configured directory:
the file, pass/reject status, the violation kinds and lines, a truncated
SHA-256 of the source and the scan time.
"""

from __future__ import annotations

import datetime
import hashlib
import json
import os
from typing import Any

from importgate.lib import config


def log_scan(
    log_dir: str,
    filepath: str,
    status: str,
    violations_data: list[dict[str, Any]],
    total_rules: int,
    source: str,
    scan_ms: int,
    *,
    fixed: bool = False,
) -> None:
    """Append a JSONL log entry for a scan result.

    Args:
        log_dir: Directory to write the log file in.
        filepath: Path to the scanned file.
        status: 'rejected' or 'passed'.
        violations_data: One summary dict per violation.
        total_rules: Number of active rules.
        source: The scanned source.
        scan_ms: Scan duration in milliseconds.
        fixed: Whether the scan was part of a fix run.
    """
    if not log_dir:
        return
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, config.get_str("filenames.scan_log"))

    utc_src = config.get_str("formatting.utc_offset_source")
    utc_rep = config.get_str("formatting.utc_offset_replacement")
    hash_prefix = config.get_str("formatting.hash_prefix")
    hash_trunc = config.get_int("defaults.hash_truncation_length")
    separators = tuple(config.get_list("formatting.json_separators"))

    entry: dict[str, Any] = {
        "timestamp": (
            datetime.datetime.now(datetime.timezone.utc)
            .isoformat()
            .replace(utc_src, utc_rep)
        ),
        "event": "fix" if fixed else "scan",
        "file": filepath,
        "status": status,
        "violations": violations_data,
        "total_rules": total_rules,
        "code_length_lines": len(source.splitlines()),
        "code_hash": hash_prefix + hashlib.sha256(source.encode()).hexdigest()[:hash_trunc],
        "scan_ms": scan_ms,
    }

    with open(log_path, "a", encoding="utf-8") as fh:
        fh.write(json.dumps(entry, separators=separators) + "\n")
