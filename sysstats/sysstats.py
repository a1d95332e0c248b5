#!/usr/bin/env python3

import argparse
import json
import pathlib
import platform
import sys

from packaging.version import Version

from .environment.memory import MEMINFO_PATH, MemoryStatsReader, ResourceUnavailable
from .utils import helpers as h
from .utils.memlogging import init_logging


def main():
    # Let's ensure no one is running below the expected python release
    min_python_release = "3.9"
    if Version(platform.python_version()) < Version(min_python_release):
        h.fatal(
            f"Current python version {platform.python_version()} is below minimal supported release : {min_python_release}"
        )

    if not is_linux():
        h.fatal(f"sysstats reads {MEMINFO_PATH} and only runs on Linux, not on {sys.platform}.")

    args = parse_options()

    if args.log_file:
        init_logging(pathlib.Path(args.log_file))

    reader = MemoryStatsReader(args.meminfo)
    try:
        stats = reader.detect()
    except ResourceUnavailable as e:
        h.fatal(str(e))

    if args.human:
        print(format_table(stats))
        return

    write_output(args.output, stats)


def is_linux():
    return sys.platform.startswith("linux")


def parse_options(argv=None):
    parser = argparse.ArgumentParser(
        prog="sysstats",
        description="Print one snapshot of the kernel memory statistics, in kilobytes",
        epilog="All values come from a single read of the memory-info source, MemUsed, SwapUsed and RealFree are derived from it.",
    )
    parser.add_argument(
        "-i",
        "--meminfo",
        default=str(MEMINFO_PATH),
        help="Specify the memory-info file to read",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Specify the file used to write the JSON snapshot instead of the standard output",
    )
    parser.add_argument(
        "-l",
        "--log-file",
        help="Specify the file receiving JSON diagnostics",
    )
    parser.add_argument(
        "--human",
        action="store_true",
        help="Print a free-like table instead of JSON",
    )
    return parser.parse_args(argv)


def format_table(stats: dict[str, int]) -> str:
    templ = "{:<7} {:>10} {:>10} {:>10} {:>10} {:>10} {:>10}"
    lines = [
        templ.format("", "total", "used", "free", "buffers", "cache", "realfree"),
        templ.format(
            "Mem:",
            h.kb_to_human(stats.get("MemTotal", 0)),
            h.kb_to_human(stats["MemUsed"]),
            h.kb_to_human(stats.get("MemFree", 0)),
            h.kb_to_human(stats.get("Buffers", 0)),
            h.kb_to_human(stats.get("Cached", 0)),
            h.kb_to_human(stats["RealFree"]),
        ),
        templ.format(
            "Swap:",
            h.kb_to_human(stats.get("SwapTotal", 0)),
            h.kb_to_human(stats["SwapUsed"]),
            h.kb_to_human(stats.get("SwapFree", 0)),
            "",
            "",
            "",
        ),
    ]
    return "\n".join(lines)


def write_output(output, stats: dict[str, int]):
    out = json.dumps(stats, indent=2, sort_keys=True)
    if not output:
        print(out)
        return
    out_file = pathlib.Path(output)
    out_file.write_text(out + "\n")
    print(f"Result file available at {str(out_file)}")


if __name__ == "__main__":
    main()
