from __future__ import annotations

import random
from collections import Counter

import pytest

from cleanup_agents.sdk_discovery import SdkCandidate
from cleanup_agents.sdk_retention import Action, decide_retention, group_by_platform
from cleanup_agents.sdk_version import parse_sdk_version


def _candidate(platform: str, raw_name: str, *, parsed: bool = True) -> SdkCandidate:
    return SdkCandidate(
        platform=platform,
        path=f"/Dev/Platforms/{platform}.platform/Developer/SDKs/{raw_name}",
        raw_name=raw_name,
        version=parse_sdk_version(raw_name) if parsed else None,
    )


@pytest.fixture
def candidates() -> list[SdkCandidate]:
    return [
        _candidate("iPhoneOS", "iPhoneOS16.0.sdk"),
        _candidate("MacOSX", "MacOSX14.0.sdk"),
        _candidate("iPhoneOS", "iPhoneOS15.5.sdk"),
        _candidate("iPhoneOS", "iPhoneOS16.2.sdk"),
    ]


def _summary(decisions) -> list[tuple[str, str, int]]:
    return [(d.candidate.raw_name, d.action.value, d.rank) for d in decisions]


def test_keep_newest_per_platform(candidates: list[SdkCandidate]) -> None:
    decisions = decide_retention(candidates, keep_count=1)

    assert _summary(decisions) == [
        ("MacOSX14.0.sdk", "keep", 1),
        ("iPhoneOS16.2.sdk", "keep", 1),
        ("iPhoneOS16.0.sdk", "remove", 2),
        ("iPhoneOS15.5.sdk", "remove", 3),
    ]


def test_decisions_do_not_depend_on_input_order(candidates: list[SdkCandidate]) -> None:
    expected = decide_retention(candidates, keep_count=2)
    rng = random.Random(7)
    for _ in range(20):
        shuffled = candidates[:]
        rng.shuffle(shuffled)
        assert decide_retention(shuffled, keep_count=2) == expected


@pytest.mark.parametrize("keep_count", [0, 1, 2, 3, 4, 10])
def test_keep_count_per_platform(candidates: list[SdkCandidate], keep_count: int) -> None:
    decisions = decide_retention(candidates, keep_count)
    sizes = Counter(c.platform for c in candidates)

    assert len(decisions) == len(candidates)
    for platform, size in sizes.items():
        group = [d for d in decisions if d.candidate.platform == platform]
        kept = [d for d in group if d.action is Action.KEEP]
        assert len(kept) == min(keep_count, size)
        assert [d.rank for d in group] == list(range(1, size + 1))
        assert all(d.rank <= keep_count for d in kept)


def test_zero_retention_removes_everything(candidates: list[SdkCandidate]) -> None:
    assert all(d.action is Action.REMOVE for d in decide_retention(candidates, 0))


def test_over_retention_keeps_everything(candidates: list[SdkCandidate]) -> None:
    assert all(d.action is Action.KEEP for d in decide_retention(candidates, 3))


def test_unversioned_is_removed_first() -> None:
    group = [
        _candidate("Foo", "FooBeta"),
        _candidate("Foo", "Foo9.2"),
        _candidate("Foo", "Foo16.2"),
        _candidate("Foo", "Foo9.10"),
        _candidate("Foo", "Foo16.0"),
    ]
    decisions = decide_retention(group, keep_count=4)

    assert [d.candidate.raw_name for d in decisions] == ["Foo16.2", "Foo16.0", "Foo9.10", "Foo9.2", "FooBeta"]
    assert decisions[-1].action is Action.REMOVE
    assert [d.action for d in decisions[:-1]] == [Action.KEEP] * 4


def test_equal_versions_tie_break_on_name() -> None:
    group = [
        _candidate("MacOSX", "MacOSX14.sdk"),
        _candidate("MacOSX", "MacOSX14.0.sdk"),
    ]
    decisions = decide_retention(list(reversed(group)), keep_count=1)

    assert _summary(decisions) == [("MacOSX14.0.sdk", "keep", 1), ("MacOSX14.sdk", "remove", 2)]


def test_unparsed_candidates_are_parsed_on_demand() -> None:
    group = [_candidate("iPhoneOS", "iPhoneOS9.2.sdk", parsed=False), _candidate("iPhoneOS", "iPhoneOS10.0.sdk", parsed=False)]
    decisions = decide_retention(group, keep_count=1)
    assert _summary(decisions)[0] == ("iPhoneOS10.0.sdk", "keep", 1)


def test_empty_input_and_negative_count() -> None:
    assert decide_retention([], keep_count=1) == []
    with pytest.raises(ValueError):
        decide_retention([], keep_count=-1)


def test_group_by_platform(candidates: list[SdkCandidate]) -> None:
    groups = group_by_platform(candidates)
    assert sorted(groups) == ["MacOSX", "iPhoneOS"]
    assert len(groups["iPhoneOS"]) == 3
