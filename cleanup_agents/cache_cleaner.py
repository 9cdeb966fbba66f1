"""
Developer cache cleaner: known, regenerable cache locations.

Categories:
  xcode     DerivedData, Archives, iOS DeviceSupport, CoreSimulator caches,
            Xcode ModuleCache (contents removed, folders kept)
  node      node_modules in the project root
  python    every __pycache__ below the project root
  java      Gradle caches and the local Maven repository
  homebrew  Homebrew download cache (contents)

Only plain paths are handled here; no package-manager commands are run.
"""
import logging
import os
import shutil
from dataclasses import dataclass

from .safe_purge_executor import Outcome, purge_path

logger = logging.getLogger(__name__)

PYCACHE_DIR = "__pycache__"
NODE_MODULES_DIR = "node_modules"
# Never walked into when looking for __pycache__
PYCACHE_SKIP_DIRS = {".git", ".hg", ".svn", NODE_MODULES_DIR, ".venv", "venv", ".tox"}


@dataclass(frozen=True)
class CacheTarget:
    category: str
    name: str
    path: str
    contents_only: bool = False


@dataclass(frozen=True)
class CacheResult:
    target: CacheTarget
    outcome: Outcome
    size_bytes: int | None = None
    reason: str | None = None


def _home(home):
    return home if home is not None else os.path.expanduser("~")


def _existing(category, candidates):
    targets = []
    for name, path, contents_only in candidates:
        if os.path.isdir(path):
            targets.append(CacheTarget(category, name, path, contents_only))
        else:
            logger.info("%s: %s not present (%s)", category, name, path)
    return targets


def xcode_cache_targets(home=None) -> list:
    developer = os.path.join(_home(home), "Library", "Developer")
    xcode = os.path.join(developer, "Xcode")
    return _existing("xcode", [
        ("DerivedData", os.path.join(xcode, "DerivedData"), True),
        ("Archives", os.path.join(xcode, "Archives"), True),
        ("iOS DeviceSupport", os.path.join(xcode, "iOS DeviceSupport"), True),
        ("CoreSimulator Caches", os.path.join(developer, "CoreSimulator", "Caches"), True),
        ("ModuleCache", os.path.join(xcode, "ModuleCache.noindex"), True),
    ])


def find_pycache_dirs(project_root) -> list:
    """All __pycache__ directories below `project_root`, sorted, not nested."""
    found = []
    for dirpath, dirnames, _ in os.walk(project_root, followlinks=False):
        if PYCACHE_DIR in dirnames:
            found.append(os.path.join(dirpath, PYCACHE_DIR))
        dirnames[:] = sorted(d for d in dirnames if d != PYCACHE_DIR and d not in PYCACHE_SKIP_DIRS)
    return sorted(found)


def project_cache_targets(project_root, targets) -> list:
    found = []
    if "node" in targets:
        found.extend(_existing("node", [
            (NODE_MODULES_DIR, os.path.join(project_root, NODE_MODULES_DIR), False),
        ]))
    if "python" in targets:
        pycaches = find_pycache_dirs(project_root)
        if not pycaches:
            logger.info("python: no __pycache__ directories under %s", project_root)
        for path in pycaches:
            rel = os.path.relpath(path, project_root)
            found.append(CacheTarget("python", rel, path))
    return found


def java_cache_targets(home=None) -> list:
    return _existing("java", [
        ("Gradle caches", os.path.join(_home(home), ".gradle", "caches"), False),
        ("Maven repository", os.path.join(_home(home), ".m2", "repository"), False),
    ])


def homebrew_cache_targets(home=None) -> list:
    return _existing("homebrew", [
        ("Homebrew cache", os.path.join(_home(home), "Library", "Caches", "Homebrew"), True),
    ])


def collect_cache_targets(config, home=None) -> list:
    """Existing cache targets for the categories selected in `config`."""
    targets = []
    if config.wants("xcode"):
        targets.extend(xcode_cache_targets(home))
    if config.wants("node") or config.wants("python"):
        targets.extend(project_cache_targets(config.project_root, config.targets))
    if config.wants("java"):
        targets.extend(java_cache_targets(home))
    if config.wants("homebrew"):
        targets.extend(homebrew_cache_targets(home))
    return targets


def clean_cache_targets(targets, mode, audit, remover=shutil.rmtree) -> list:
    results = []
    for target in targets:
        outcome, size, reason = purge_path(
            target.path, mode, contents_only=target.contents_only, remover=remover
        )
        result = CacheResult(target=target, outcome=outcome, size_bytes=size, reason=reason)
        audit.record_cache(result)
        results.append(result)
    return results
