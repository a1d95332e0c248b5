import json
import logging

from ..environment import memory
from .memlogging import SnapshotJsonFormatter, DATEFMT, LOGGER_NAME, init_logging, memlog


class TestJsonLogging:
    def test_format_keeps_extra_fields(self):
        record = logging.LogRecord(LOGGER_NAME, logging.WARNING, __file__, 1, "skipping %s", ("MemTotal",), None)
        record.field = "MemTotal"
        record.thread_label = "main"
        out = json.loads(SnapshotJsonFormatter(datefmt=DATEFMT).format(record))
        assert out["message"] == "skipping MemTotal"
        assert out["level"] == "WARNING"
        assert out["field"] == "MemTotal"
        assert "timestamp" in out
        assert "msg" not in out
        assert "pathname" not in out
        assert "thread_label" not in out

    def test_init_logging(self, tmp_path):
        logfile = tmp_path / "sysstats.log"
        init_logging(logfile)
        logger = memlog()
        try:
            logger.info("snapshot", extra={"file": "/proc/meminfo"})
            for handler in logger.handlers:
                handler.flush()
            line = logfile.read_text().splitlines()[0]
            out = json.loads(line)
            assert out["message"] == "snapshot"
            assert out["file"] == "/proc/meminfo"
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.setLevel(logging.NOTSET)

    def test_reader_diagnostics_in_log_file(self, tmp_path):
        meminfo = tmp_path / "meminfo"
        meminfo.write_text(f"MemFree: {memory.MAX_VALUE} kB\nBuffers: 1 kB\nCached: 1 kB\n")
        logfile = tmp_path / "sysstats.log"
        init_logging(logfile, logging.WARNING)
        logger = memlog()
        try:
            memory.get_mem_stats(meminfo)
            for handler in logger.handlers:
                handler.flush()
            records = [json.loads(line) for line in logfile.read_text().splitlines()]
        finally:
            for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()
            logger.setLevel(logging.NOTSET)
        overflow = [r for r in records if "overflow" in r]
        assert len(overflow) == 1
        assert overflow[0]["stat"] == "RealFree"
        assert overflow[0]["overflow"] == memory.MAX_VALUE + 2
        assert {r["level"] for r in records} == {"WARNING"}
