import sys

# Memory statistics are only exposed by the Linux kernel, other platforms get nothing
if sys.platform.startswith("linux"):
    from .environment.memory import (  # noqa: F401
        MemStats,
        MemoryStatsReader,
        ResourceUnavailable,
        FieldParseError,
        get_mem_stats,
    )
