"""
SDK version parsing.

Xcode names its SDK bundles `<platform><major>[.<minor>].sdk`, e.g.
`iPhoneOS16.2.sdk` or `MacOSX14.sdk`. The version is read from the trailing
digits so that bundles can be ranked numerically (9.10 above 9.2), which a
plain text sort gets wrong.
"""
import functools
import re

SDK_BUNDLE_SUFFIX = ".sdk"

_TRAILING_VERSION = re.compile(r"(\d+\.\d+|\d+)$")


@functools.total_ordering
class VersionKey:
    """Comparable version made of non-negative integer components.

    Missing components compare as 0, so `16` == `16.0`. A key without
    components is the "unversioned" sentinel and sorts below everything.
    """

    __slots__ = ("parts",)

    def __init__(self, parts=()):
        self.parts = tuple(int(p) for p in parts)

    @property
    def is_sentinel(self) -> bool:
        return not self.parts

    def _padded(self, width: int) -> tuple:
        return self.parts + (0,) * (width - len(self.parts))

    def __eq__(self, other):
        if not isinstance(other, VersionKey):
            return NotImplemented
        if self.is_sentinel or other.is_sentinel:
            return self.is_sentinel and other.is_sentinel
        width = max(len(self.parts), len(other.parts))
        return self._padded(width) == other._padded(width)

    def __lt__(self, other):
        if not isinstance(other, VersionKey):
            return NotImplemented
        if self.is_sentinel or other.is_sentinel:
            return self.is_sentinel and not other.is_sentinel
        width = max(len(self.parts), len(other.parts))
        return self._padded(width) < other._padded(width)

    def __hash__(self):
        parts = list(self.parts)
        while parts and parts[-1] == 0:
            parts.pop()
        return hash((self.is_sentinel, tuple(parts)))

    def __repr__(self):
        return f"VersionKey({self.parts!r})"

    def __str__(self):
        if self.is_sentinel:
            return "unknown"
        return ".".join(str(p) for p in self.parts)


UNVERSIONED = VersionKey()


def strip_bundle_suffix(raw_name: str) -> str:
    if raw_name.endswith(SDK_BUNDLE_SUFFIX):
        return raw_name[: -len(SDK_BUNDLE_SUFFIX)]
    return raw_name


def parse_sdk_version(raw_name: str) -> VersionKey:
    """Extract the trailing `<major>[.<minor>]` version from an SDK name.

    Never raises: names without trailing digits (`iPhoneOS.sdk`,
    `MacOSXBeta.sdk`) get the `UNVERSIONED` sentinel so they still take part
    in the ranking, at the bottom.
    """
    if not raw_name:
        return UNVERSIONED
    match = _TRAILING_VERSION.search(strip_bundle_suffix(raw_name))
    if not match:
        return UNVERSIONED
    return VersionKey(match.group(1).split("."))
