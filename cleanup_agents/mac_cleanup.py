"""
Mac Cleanup: reclaim disk space from developer caches and old Xcode SDKs.

CLI Contract:
  mac-cleanup [--apply] [--targets xcode,node,python,java,homebrew,flutter,docker]
              [--project-root PATH] [--keep-sdk-count N]
              [--developer-root PATH] [--log PATH] [--verbose]

Dry run by default: every candidate is listed with its decision and size,
nothing is deleted until --apply is given.

Emits newline-delimited JSON events on stdout:
  {"event":"start", ...}      effective configuration
  {"event":"category", ...}   a category begins or is skipped
                              (flutter/docker are always skipped)
  {"event":"sdk", ...}        one retention decision and its outcome
  {"event":"cache", ...}      one cache path and its outcome
  {"event":"complete", ...}   counts per outcome, freed/reclaimable bytes,
                              number of audit entries recorded
  {"event":"error", ...}      invalid configuration (exit status 2)

Error Handling Contract:
  Invalid configuration → error event, exit 2, nothing discovered or deleted
                          (includes a --log path that cannot be opened)
  Xcode not installed   → SDK cleanup skipped with a warning
  Deletion failure      → recorded as "failed", run continues, exit 0
"""
import argparse
import dataclasses
import logging
import sys

from .audit_log import AuditLog, configure_logging, default_log_path, format_size
from .cache_cleaner import clean_cache_targets, collect_cache_targets
from .config import (
    ALL_TARGETS,
    DEFAULT_KEEP_SDK_COUNT,
    KNOWN_TARGETS,
    PASS_THROUGH_TARGETS,
    ConfigError,
    build_config,
)
from .safe_purge_executor import apply_decisions, summarize
from .sdk_discovery import discover_sdks, resolve_developer_root
from .sdk_retention import decide_retention

logger = logging.getLogger(__name__)


def run_sdk_cleanup(config, audit) -> list:
    """Discover SDK bundles, decide retention per platform and execute it."""
    developer_root = config.developer_root or resolve_developer_root()
    if not developer_root:
        logger.warning("Xcode developer path not found (xcode-select -p failed). Skipping SDK cleanup.")
        audit.emit({"event": "category", "category": "xcode_sdks", "status": "skipped",
                    "reason": "developer root not found"})
        return []

    candidates = discover_sdks(developer_root)
    if not candidates:
        logger.info("No SDK directories found under %s. Skipping SDK deletion.", developer_root)
        audit.emit({"event": "category", "category": "xcode_sdks", "status": "skipped",
                    "reason": "no SDK bundles found", "developer_root": developer_root})
        return []

    logger.info("Found %d SDK(s) under %s. Will keep newest %d per platform.",
                len(candidates), developer_root, config.keep_sdk_count)
    audit.emit({"event": "category", "category": "xcode_sdks", "status": "started",
                "developer_root": developer_root, "candidates": len(candidates)})

    decisions = decide_retention(candidates, config.keep_sdk_count)
    return apply_decisions(decisions, config.mode, audit)


def run_cache_cleanup(config, audit, home=None) -> list:
    targets = collect_cache_targets(config, home=home)
    audit.emit({"event": "category", "category": "caches", "status": "started",
                "targets": len(targets)})
    return clean_cache_targets(targets, config.mode, audit)


def run_cleanup(config, audit, home=None) -> dict:
    results = []
    if config.wants("xcode"):
        results.extend(run_sdk_cleanup(config, audit))
    results.extend(run_cache_cleanup(config, audit, home=home))
    for target in PASS_THROUGH_TARGETS:
        if config.wants(target):
            logger.warning("%s cleanup runs a third-party command; not supported, skipping.", target)
            audit.emit({"event": "category", "category": target, "status": "skipped",
                        "reason": "pass-through commands not supported"})
    return summarize(results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac-cleanup",
        description="Remove build caches and unused Xcode SDKs (dry run by default).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  # Dry run for everything
  mac-cleanup

  # Delete caches and old SDKs, keeping the newest SDK per platform
  mac-cleanup --apply --targets xcode,node,homebrew --keep-sdk-count 1

  # Only node and python caches of one project
  mac-cleanup --apply --targets node,python --project-root /path/to/project
        """,
    )
    parser.add_argument("--apply", action="store_true",
                        help="Actually perform deletions (default is dry run)")
    parser.add_argument("--targets", default=ALL_TARGETS,
                        help=f"Comma-separated list: {ALL_TARGETS},{','.join(KNOWN_TARGETS + PASS_THROUGH_TARGETS)} "
                             "(default: all; flutter and docker are only reported as skipped)")
    parser.add_argument("--project-root", default=None,
                        help="Project for node/python cleanup (default: current directory)")
    parser.add_argument("--keep-sdk-count", default=str(DEFAULT_KEEP_SDK_COUNT),
                        help="Keep the newest N SDKs per Xcode platform (default: 1)")
    parser.add_argument("--developer-root", default=None,
                        help="Xcode developer directory (default: xcode-select -p)")
    parser.add_argument("--log", default=None,
                        help="Path to log file (default: mac_cleanup_<timestamp>.log in the temp dir)")
    parser.add_argument("--verbose", action="store_true",
                        help="Also print progress to stderr")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    audit = AuditLog()

    try:
        config = build_config(args)
        if not config.log_path:
            config = dataclasses.replace(config, log_path=default_log_path())
        try:
            configure_logging(config.log_path, verbose=config.verbose)
        except OSError as e:
            raise ConfigError(f"Cannot open log file {config.log_path}: {e.strerror or e}") from e
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        audit.emit({"event": "error", "message": str(e)})
        return e.exit_code

    logger.info("Starting mac cleanup: %s", config.as_dict())
    audit.emit({"event": "start", **config.as_dict()})

    summary = run_cleanup(config, audit)

    if config.dry_run:
        logger.info("Dry run: %s reclaimable. Re-run with --apply to remove files.",
                    format_size(summary["reclaimable_bytes"]))
    else:
        logger.info("Freed %s.", format_size(summary["freed_bytes"]))
    failed = summary["counts"]["failed"]
    if failed:
        logger.warning("%d path(s) could not be removed; see %s", failed, config.log_path)

    audit.emit({
        "event": "complete",
        "mode": config.mode.value,
        "summary": summary,
        "freed_formatted": format_size(summary["freed_bytes"]),
        "reclaimable_formatted": format_size(summary["reclaimable_bytes"]),
        "recorded": audit.count,
        "log_path": config.log_path,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
