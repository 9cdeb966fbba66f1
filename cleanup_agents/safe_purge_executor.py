import enum
import logging
import os
import shutil
from dataclasses import dataclass

from .config import Mode
from .sdk_retention import Action, RetentionDecision

logger = logging.getLogger(__name__)


class Outcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED_ALREADY_ABSENT = "skipped_already_absent"
    SKIPPED_KEPT = "skipped_kept"
    WOULD_REMOVE = "would_remove"


@dataclass(frozen=True)
class ExecutionResult:
    decision: RetentionDecision
    outcome: Outcome
    size_bytes: int | None = None
    reason: str | None = None


def protected_paths():
    """Directories that must never be deleted, whatever a caller asks for."""
    user_home = os.path.expanduser('~')
    paths = {
        user_home,
        os.path.join(user_home, "Desktop"),
        os.path.join(user_home, "Documents"),
        os.path.join(user_home, "Downloads"),
        os.path.join(user_home, "Library"),
        os.path.join(user_home, "Library", "Developer"),
        os.path.join(user_home, "Library", "Caches"),
        "/",
        "/System",
        "/Applications",
        "/Library",
        "/Users",
        "/var",
        "/private",
        "/usr",
        "/bin",
        "/sbin",
        "/tmp",
    }
    return {os.path.realpath(p) for p in paths}


def is_protected(path: str) -> bool:
    return os.path.realpath(path) in protected_paths()


def get_directory_size(start_path):
    """Best-effort on-disk size in bytes; None if the path does not exist.

    Symlinks are not followed. Files that vanish or cannot be read while
    walking are skipped rather than failing the whole computation.
    """
    if not os.path.lexists(start_path):
        return None
    if os.path.islink(start_path) or not os.path.isdir(start_path):
        try:
            return os.lstat(start_path).st_size
        except OSError:
            return None

    total_size = 0
    for dirpath, _, filenames in os.walk(start_path, followlinks=False):
        for f in filenames:
            fp = os.path.join(dirpath, f)
            try:
                total_size += os.lstat(fp).st_size
            except OSError:
                pass
    return total_size


def _remove(path, remover):
    if os.path.isdir(path) and not os.path.islink(path):
        remover(path)
    else:
        os.remove(path)


def _describe(error: OSError) -> str:
    if error.strerror:
        return f"{type(error).__name__}: {error.strerror}"
    return f"{type(error).__name__}: {error}"


def purge_path(path, mode, *, contents_only=False, remover=shutil.rmtree):
    """Delete (or, in dry run, measure) one path.

    Returns `(outcome, size_bytes, reason)` and never raises for filesystem
    errors. With `contents_only` the directory itself is kept and every
    child is removed; the first failure is reported but the remaining
    children are still attempted.
    """
    if is_protected(path):
        logger.warning("Refusing to delete protected path %s", path)
        return Outcome.FAILED, None, "protected path"

    if mode is Mode.DRY_RUN:
        return Outcome.WOULD_REMOVE, get_directory_size(path), None

    if not os.path.lexists(path):
        return Outcome.SKIPPED_ALREADY_ABSENT, None, None

    size = get_directory_size(path)
    if not contents_only:
        try:
            _remove(path, remover)
        except FileNotFoundError:
            # Removed by someone else after the existence check
            return Outcome.SKIPPED_ALREADY_ABSENT, size, None
        except OSError as e:
            logger.debug("Deleting %s failed", path, exc_info=True)
            return Outcome.FAILED, size, _describe(e)
        return Outcome.SUCCEEDED, size, None

    try:
        children = sorted(os.listdir(path))
    except OSError as e:
        return Outcome.FAILED, size, _describe(e)

    first_error = None
    for child in children:
        child_path = os.path.join(path, child)
        try:
            _remove(child_path, remover)
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.debug("Deleting %s failed", child_path, exc_info=True)
            if first_error is None:
                first_error = f"{child}: {_describe(e)}"
    if first_error:
        return Outcome.FAILED, size, first_error
    return Outcome.SUCCEEDED, size, None


def apply_decisions(decisions, mode, audit, remover=shutil.rmtree):
    """Execute retention decisions one at a time, in the order given.

    KEEP decisions are recorded without touching the filesystem. A failed
    deletion is recorded and the next candidate is still processed. Each
    result reaches the audit log before the next candidate starts.
    """
    results = []
    for decision in decisions:
        if decision.action is Action.KEEP:
            result = ExecutionResult(decision=decision, outcome=Outcome.SKIPPED_KEPT)
        else:
            outcome, size, reason = purge_path(decision.candidate.path, mode, remover=remover)
            result = ExecutionResult(decision=decision, outcome=outcome, size_bytes=size, reason=reason)
        audit.record_sdk(result)
        results.append(result)
    return results


def summarize(results) -> dict:
    """Aggregate counts per outcome plus reclaimed and reclaimable bytes."""
    counts = {outcome.value: 0 for outcome in Outcome}
    freed_bytes = 0
    reclaimable_bytes = 0
    for result in results:
        counts[result.outcome.value] += 1
        if result.outcome is Outcome.SUCCEEDED:
            freed_bytes += result.size_bytes or 0
        elif result.outcome is Outcome.WOULD_REMOVE:
            reclaimable_bytes += result.size_bytes or 0
    return {
        "counts": counts,
        "total": sum(counts.values()),
        "freed_bytes": freed_bytes,
        "reclaimable_bytes": reclaimable_bytes,
    }
