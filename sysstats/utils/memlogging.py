import json
import logging
import pathlib

from time import gmtime, strftime

DATEFMT = "%Y/%m/%dT%H:%M:%SZ"
LOGGER_NAME = "sysstats"


def init_logging(logfile: pathlib.Path, level: int = logging.DEBUG) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    out = logging.FileHandler(filename=logfile, encoding="utf-8")
    out.setLevel(level)
    out.setFormatter(SnapshotJsonFormatter(datefmt=DATEFMT))
    logger.addHandler(out)


def memlog() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


class SnapshotJsonFormatter(logging.Formatter):
    """One JSON object per diagnostic of a meminfo read.

    Only the fields the reader attaches through `extra` are exported:
    - field, value, file: a recognized line whose value was skipped
    - stat, missing: a derived statistic computed from absent inputs
    - stat, overflow: a derived statistic saturated to the u64 maximum
    """

    snapshot_keys = ("field", "value", "file", "stat", "missing", "overflow")

    def format(self, record: logging.LogRecord) -> str:
        output = {
            "timestamp": strftime(DATEFMT, gmtime(record.created)),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key in self.snapshot_keys:
            if key in record.__dict__:
                output[key] = record.__dict__[key]
        return json.dumps(output)
