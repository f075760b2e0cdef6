"""日志配置测试"""

from __future__ import annotations

import json
import logging

import pytest

from pkgstore.utils.logger import JSONFormatter, reset_logging, setup_logging


@pytest.fixture(autouse=True)
def _restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    reset_logging()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


class TestJSONFormatter:
    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            "pkgstore.test", logging.INFO, __file__, 10, "step %s", ("ok",), None,
        )
        for k, v in extra.items():
            setattr(record, k, v)
        return record

    def test_fields(self) -> None:
        entry = json.loads(JSONFormatter().format(self._record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "pkgstore.test"
        assert entry["message"] == "step ok"
        assert "package" not in entry

    def test_package_field(self) -> None:
        entry = json.loads(JSONFormatter().format(self._record(package="a@1")))
        assert entry["package"] == "a@1"


class TestSetupLogging:
    def test_single_handler(self) -> None:
        setup_logging("DEBUG")
        setup_logging("WARNING", json_output=True)
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self) -> None:
        setup_logging("chatty")
        assert logging.getLogger().level == logging.INFO
