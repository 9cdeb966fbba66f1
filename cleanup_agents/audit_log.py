"""
Audit log for cleanup runs.

Each outcome is written as one JSON line to stdout (the same streaming
contract the scanner agents use) and mirrored as a readable line through
`logging`, which `configure_logging` sends to the run's log file.
"""
import json
import logging
import os
import sys
import tempfile
from datetime import datetime

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "cleanup_agents"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def default_log_path() -> str:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return os.path.join(tempfile.gettempdir(), f"mac_cleanup_{stamp}.log")


def configure_logging(log_path: str | None, verbose: bool = False) -> logging.Logger:
    """Send package logs to `log_path` and warnings (or everything) to stderr."""
    root = logging.getLogger(PACKAGE_LOGGER)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_path:
        os.makedirs(os.path.dirname(os.path.abspath(log_path)), exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root.addHandler(console)
    root.propagate = False
    return root


def format_size(size_bytes) -> str:
    """Convert bytes to human-readable format; None means unknown."""
    if size_bytes is None:
        return "unknown"
    if size_bytes == 0:
        return "0 B"
    units = ("B", "KB", "MB", "GB", "TB")
    size = float(size_bytes)
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024.0
        i += 1
    return f"{round(size, 2)} {units[i]}"


class AuditLog:
    """Append-only sink for per-path outcomes.

    Lines are written and flushed before `record_*` returns, so the emitted
    order is the processing order.
    """

    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout
        self.count = 0

    def emit(self, event_dict: dict):
        try:
            self.stream.write(json.dumps(event_dict) + "\n")
            self.stream.flush()
        except BrokenPipeError:
            sys.exit(0)

    def _record(self, event_dict: dict, message: str, failed: bool):
        self.emit(event_dict)
        self.count += 1
        if failed:
            logger.warning(message)
        else:
            logger.info(message)

    def record_sdk(self, result):
        candidate = result.decision.candidate
        entry = {
            "event": "sdk",
            "platform": candidate.platform,
            "path": candidate.path,
            "version": str(candidate.version) if candidate.version is not None else "unknown",
            "action": result.decision.action.value,
            "rank": result.decision.rank,
            "result": result.outcome.value,
            "size_bytes": result.size_bytes,
            "size_formatted": format_size(result.size_bytes),
            "reason": result.reason,
        }
        message = (
            f"SDK {candidate.platform} #{result.decision.rank} {candidate.raw_name} "
            f"(version {entry['version']}): {result.decision.action.value} -> "
            f"{result.outcome.value} size={entry['size_formatted']}"
        )
        if result.reason:
            message += f" reason={result.reason}"
        self._record(entry, message, result.outcome.value == "failed")

    def record_cache(self, result):
        target = result.target
        entry = {
            "event": "cache",
            "category": target.category,
            "name": target.name,
            "path": target.path,
            "contents_only": target.contents_only,
            "result": result.outcome.value,
            "size_bytes": result.size_bytes,
            "size_formatted": format_size(result.size_bytes),
            "reason": result.reason,
        }
        message = (
            f"{target.category}: {target.name} {target.path} -> "
            f"{result.outcome.value} size={entry['size_formatted']}"
        )
        if result.reason:
            message += f" reason={result.reason}"
        self._record(entry, message, result.outcome.value == "failed")
