from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from cleanup_agents.audit_log import AuditLog, configure_logging, default_log_path, format_size


@pytest.mark.parametrize(
    ("size", "expected"),
    [(None, "unknown"), (0, "0 B"), (512, "512.0 B"), (1536, "1.5 KB"), (5 * 1024 ** 3, "5.0 GB")],
)
def test_format_size(size, expected: str) -> None:
    assert format_size(size) == expected


def test_emit_writes_one_json_line_per_event() -> None:
    stream = io.StringIO()
    audit = AuditLog(stream)

    audit.emit({"event": "start", "mode": "dry_run"})
    audit.emit({"event": "complete"})

    lines = stream.getvalue().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["start", "complete"]


def test_configure_logging_writes_log_file(tmp_path: Path) -> None:
    log_path = tmp_path / "nested" / "cleanup.log"
    configure_logging(str(log_path))

    logging.getLogger("cleanup_agents.sdk_discovery").info("Found 3 SDK(s)")

    assert "[INFO] Found 3 SDK(s)" in log_path.read_text(encoding="utf-8")


def test_configure_logging_replaces_previous_handlers(tmp_path: Path) -> None:
    first = configure_logging(str(tmp_path / "a.log"))
    count = len(first.handlers)
    second = configure_logging(str(tmp_path / "b.log"))
    assert len(second.handlers) == count


def test_default_log_path_is_timestamped() -> None:
    assert Path(default_log_path()).name.startswith("mac_cleanup_")
