from __future__ import annotations

import pathlib
import re
from typing import Iterable, Union

from ..utils.memlogging import memlog
from .base import BaseEnvironment

MEMINFO_PATH = pathlib.Path("/proc/meminfo")

# Values are kilobytes and must fit an unsigned 64 bits integer
MAX_VALUE = 2**64 - 1

MemStats = dict[str, int]

# Order matches the kernel's own output
RECOGNIZED_FIELDS = [
    "MemTotal",
    "MemFree",
    "Buffers",
    "Cached",
    "SwapCached",
    "Active",
    "Inactive",
    "SwapTotal",
    "SwapFree",
    "Dirty",
    "Writeback",
    "Mapped",
    "Slab",
    "CommitLimit",
    "Committed_AS",
]

# MemTotal:       32597856 kB
# Active(anon) or VmallocTotal lines must not match
MEMINFO_LINE = re.compile(
    r"^((?:Mem|Swap)(?:Total|Free)|Buffers|Cached|"
    r"SwapCached|Active|Inactive|Dirty|Writeback|Mapped|Slab|"
    r"Commit(?:Limit|ted_AS)):\s*([0-9]+)",
    re.ASCII,
)


class ResourceUnavailable(RuntimeError):
    """The memory-info source could not be opened."""


class FieldParseError(ValueError):
    """A recognized field carries a value that is not an unsigned 64 bits integer."""

    def __init__(self, field: str, value: str):
        super().__init__(f"{field}: cannot parse {value!r} as an unsigned 64 bits integer")
        self.field = field
        self.value = value


def parse_value(field: str, value: str) -> int:
    try:
        amount = int(value, 10)
    except ValueError as e:
        raise FieldParseError(field, value) from e
    if amount < 0 or amount > MAX_VALUE:
        raise FieldParseError(field, value)
    return amount


class MemoryStatsReader(BaseEnvironment):
    """Produce one snapshot of named memory statistics, in kilobytes.

    The recognized fields are copied from the source when present, then
    MemUsed, SwapUsed and RealFree are always added:
    - MemUsed = MemTotal - MemFree
    - SwapUsed = SwapTotal - SwapFree
    - RealFree = MemFree + Buffers + Cached

    A missing input counts as zero and subtractions never go below zero.
    Sums saturate at MAX_VALUE.
    """

    def __init__(self, path: Union[str, pathlib.Path] = MEMINFO_PATH):
        self.path = pathlib.Path(path)
        self._stats: MemStats = {}

    def detect(self) -> MemStats:
        try:
            with open(self.path, encoding="ascii", errors="replace") as f:
                stats = self.parse(f)
        except OSError as e:
            raise ResourceUnavailable(f"{self.path} cannot be read ({e}). Are you running on Linux?") from e
        self._stats = stats
        return dict(stats)

    def parse(self, lines: Iterable[str]) -> MemStats:
        stats: MemStats = {}
        for line in lines:
            match = MEMINFO_LINE.match(line)
            if not match:
                continue
            field, value = match.groups()
            try:
                stats[field] = parse_value(field, value)
            except FieldParseError as e:
                memlog().warning(
                    str(e),
                    extra={
                        "field": field,
                        "value": value,
                        "file": str(self.path),
                    },
                )
        self._derive(stats)
        return stats

    def _derive(self, stats: MemStats):
        stats["MemUsed"] = self._difference(stats, "MemUsed", "MemTotal", "MemFree")
        stats["SwapUsed"] = self._difference(stats, "SwapUsed", "SwapTotal", "SwapFree")
        real_free = sum(self._inputs(stats, "RealFree", "MemFree", "Buffers", "Cached"))
        stats["RealFree"] = self._saturate("RealFree", real_free)

    def _difference(self, stats: MemStats, name: str, total: str, free: str) -> int:
        total_value, free_value = self._inputs(stats, name, total, free)
        return max(total_value - free_value, 0)

    def _saturate(self, name: str, value: int) -> int:
        if value > MAX_VALUE:
            memlog().warning(
                f"{name} overflows an unsigned 64 bits integer, saturated",
                extra={"stat": name, "overflow": value},
            )
            return MAX_VALUE
        return value

    def _inputs(self, stats: MemStats, name: str, *fields: str) -> list[int]:
        missing = [field for field in fields if field not in stats]
        if missing:
            memlog().warning(
                f"{name} computed with missing inputs counted as zero",
                extra={"stat": name, "missing": missing},
            )
        return [stats.get(field, 0) for field in fields]

    def dump(self) -> MemStats:
        return dict(self._stats)

    def missing_fields(self) -> list[str]:
        """Recognized fields the last snapshot did not provide.

        Slab, Dirty, Mapped, Writeback and Committed_AS require a 2.6 kernel,
        CommitLimit a 2.6.9 one.
        """
        return [field for field in RECOGNIZED_FIELDS if field not in self._stats]


def get_mem_stats(path: Union[str, pathlib.Path] = MEMINFO_PATH) -> MemStats:
    """Return a fresh snapshot of /proc/meminfo, raises ResourceUnavailable."""
    return MemoryStatsReader(path).detect()
