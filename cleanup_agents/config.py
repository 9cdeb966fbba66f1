"""Run configuration and its validation.

Everything the cleanup needs is carried in one `CleanupConfig` value that is
handed to the agents explicitly. Invalid input raises `ConfigError` before
any discovery or deletion happens.
"""
import enum
import os
from dataclasses import dataclass

DEFAULT_KEEP_SDK_COUNT = 1
KNOWN_TARGETS = ("xcode", "node", "python", "java", "homebrew")
# Accepted for compatibility; their cleanup is a third-party command, not run here
PASS_THROUGH_TARGETS = ("flutter", "docker")
ALL_TARGETS = "all"

EXIT_CONFIG_ERROR = 2


class ConfigError(Exception):
    exit_code = EXIT_CONFIG_ERROR


class Mode(str, enum.Enum):
    DRY_RUN = "dry_run"
    APPLY = "apply"


@dataclass(frozen=True)
class CleanupConfig:
    mode: Mode = Mode.DRY_RUN
    keep_sdk_count: int = DEFAULT_KEEP_SDK_COUNT
    targets: tuple = KNOWN_TARGETS
    project_root: str = "."
    developer_root: str | None = None
    log_path: str | None = None
    verbose: bool = False

    @property
    def dry_run(self) -> bool:
        return self.mode is Mode.DRY_RUN

    def wants(self, target: str) -> bool:
        return target in self.targets

    def as_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "keep_sdk_count": self.keep_sdk_count,
            "targets": list(self.targets),
            "project_root": self.project_root,
            "developer_root": self.developer_root,
            "log_path": self.log_path,
        }


def parse_targets(text) -> tuple:
    """Parse a comma-separated target list; `all` expands to every cleanable target."""
    names = [part.strip().lower() for part in (text or ALL_TARGETS).split(",")]
    names = [name for name in names if name]
    if not names or ALL_TARGETS in names:
        return KNOWN_TARGETS

    unknown = sorted(set(names) - set(KNOWN_TARGETS) - set(PASS_THROUGH_TARGETS))
    if unknown:
        raise ConfigError(
            f"Unknown target(s): {', '.join(unknown)}. "
            f"Valid targets: {ALL_TARGETS}, {', '.join(KNOWN_TARGETS + PASS_THROUGH_TARGETS)}"
        )
    # Known order, duplicates dropped
    return tuple(t for t in KNOWN_TARGETS + PASS_THROUGH_TARGETS if t in names)


def parse_keep_count(value) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"--keep-sdk-count must be a non-negative integer, got {value!r}")
    try:
        count = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"--keep-sdk-count must be a non-negative integer, got {value!r}") from None
    if count < 0:
        raise ConfigError(f"--keep-sdk-count must be a non-negative integer, got {count}")
    return count


def build_config(args) -> CleanupConfig:
    """Validate parsed CLI arguments into a CleanupConfig."""
    project_root = os.path.abspath(os.path.expanduser(args.project_root or os.getcwd()))
    developer_root = args.developer_root
    if developer_root:
        developer_root = os.path.abspath(os.path.expanduser(developer_root))

    return CleanupConfig(
        mode=Mode.APPLY if args.apply else Mode.DRY_RUN,
        keep_sdk_count=parse_keep_count(args.keep_sdk_count),
        targets=parse_targets(args.targets),
        project_root=project_root,
        developer_root=developer_root,
        log_path=args.log,
        verbose=bool(getattr(args, "verbose", False)),
    )
