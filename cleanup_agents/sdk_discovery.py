"""
SDK Discovery: enumerates installed Xcode SDK bundles per platform.

Layout walked under the developer root (what `xcode-select -p` prints):

  <developer_root>/Platforms/<Name>.platform/Developer/SDKs/<Bundle>.sdk

Run with `python -m cleanup_agents.sdk_discovery` to print the discovered SDKs.
"""
import json
import logging
import os
import subprocess
from dataclasses import dataclass

from .sdk_version import SDK_BUNDLE_SUFFIX, VersionKey, parse_sdk_version

logger = logging.getLogger(__name__)

PLATFORMS_DIR = "Platforms"
PLATFORM_SUFFIX = ".platform"
PLATFORM_SDKS_SUBPATH = os.path.join("Developer", "SDKs")
FALLBACK_DEVELOPER_ROOT = "/Applications/Xcode.app/Contents/Developer"


@dataclass(frozen=True)
class SdkCandidate:
    platform: str
    path: str
    raw_name: str
    version: VersionKey | None = None


def run_cmd(cmd: list) -> str:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True, timeout=10)
        return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        return ""


def resolve_developer_root() -> str | None:
    """Locate the active Xcode developer directory, or None if Xcode is absent."""
    selected = run_cmd(["xcode-select", "-p"])
    if selected:
        return selected
    if os.path.isdir(FALLBACK_DEVELOPER_ROOT):
        return FALLBACK_DEVELOPER_ROOT
    return None


def platform_name(platform_dir: str) -> str:
    name = os.path.basename(platform_dir.rstrip(os.sep))
    if name.endswith(PLATFORM_SUFFIX):
        name = name[: -len(PLATFORM_SUFFIX)]
    return name


def _scandir_sorted(path: str) -> list:
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.debug("Cannot list %s: %s", path, e)
        return []


def _is_real_dir(entry) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def list_sdk_bundles(developer_root: str | None):
    """Yield (platform, path, raw_name) for each SDK bundle directory.

    Symlinked aliases such as `iPhoneOS.sdk -> iPhoneOS17.2.sdk` are not
    bundles of their own and are skipped along with any non-`.sdk` entry.
    """
    if not developer_root or not os.path.isdir(developer_root):
        return
    platforms_root = os.path.join(developer_root, PLATFORMS_DIR)
    for platform_entry in _scandir_sorted(platforms_root):
        if not _is_real_dir(platform_entry):
            continue
        sdks_dir = os.path.join(platform_entry.path, PLATFORM_SDKS_SUBPATH)
        if not os.path.isdir(sdks_dir):
            continue
        platform = platform_name(platform_entry.path)
        for sdk_entry in _scandir_sorted(sdks_dir):
            if not sdk_entry.name.endswith(SDK_BUNDLE_SUFFIX):
                continue
            if not _is_real_dir(sdk_entry):
                continue
            yield platform, sdk_entry.path, sdk_entry.name


def discover_sdks(developer_root: str | None) -> list:
    """Discover SDK bundles and parse their versions in one pass.

    A missing or empty developer root yields an empty list; toolchain
    cleanup is then simply skipped by the caller.
    """
    candidates = [
        SdkCandidate(
            platform=platform,
            path=path,
            raw_name=raw_name,
            version=parse_sdk_version(raw_name),
        )
        for platform, path, raw_name in list_sdk_bundles(developer_root)
    ]
    logger.debug("Discovered %d SDK bundle(s) under %s", len(candidates), developer_root)
    return candidates


if __name__ == "__main__":
    root = resolve_developer_root()
    print(json.dumps({
        "developer_root": root,
        "sdks": [
            {"platform": c.platform, "path": c.path, "version": str(c.version)}
            for c in discover_sdks(root)
        ],
    }, indent=2))
