from __future__ import annotations

import logging
from pathlib import Path

import pytest

from cleanup_agents.audit_log import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def make_developer_root(root: Path, layout: dict[str, list[str]]) -> Path:
    """Build `<root>/Platforms/<P>.platform/Developer/SDKs/<sdk>` directories."""
    for platform, sdks in layout.items():
        sdks_dir = root / "Platforms" / f"{platform}.platform" / "Developer" / "SDKs"
        sdks_dir.mkdir(parents=True, exist_ok=True)
        for name in sdks:
            bundle = sdks_dir / name
            (bundle / "usr" / "include").mkdir(parents=True, exist_ok=True)
            (bundle / "SDKSettings.plist").write_bytes(b"x" * 100)
    return root


@pytest.fixture
def developer_root(tmp_path: Path) -> Path:
    return make_developer_root(
        tmp_path / "Developer",
        {
            "iPhoneOS": ["iPhoneOS16.2.sdk", "iPhoneOS16.0.sdk", "iPhoneOS15.5.sdk"],
            "MacOSX": ["MacOSX14.0.sdk"],
        },
    )


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home
