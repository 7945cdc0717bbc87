"""Logging and settings tests — JSON log lines and environment-driven config."""

import json
import logging

from chainlab.config import Settings
from chainlab.core.domain_types import DatabaseBackend
from chainlab.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord("chainlab.test", logging.INFO, __file__, 1, "hello %s", ("x",), None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_formatter_includes_known_extras_only():
    line = json.loads(JSONFormatter().format(_record(store_name="kb", secret="nope")))
    assert line["message"] == "hello x"
    assert line["level"] == "INFO"
    assert line["logger"] == "chainlab.test"
    assert line["store_name"] == "kb"
    assert "secret" not in line


def test_setup_logging_is_idempotent():
    setup_logging("DEBUG", "text")
    setup_logging("WARNING", "json")
    ours = [h for h in logging.root.handlers if h.get_name() == "chainlab"]
    assert len(ours) == 1
    assert isinstance(ours[0].formatter, JSONFormatter)
    assert logging.root.level == logging.WARNING


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_BACKEND", "json")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@host/db")
    monkeypatch.setenv("AGENT_MAX_ITERATIONS", "7")
    settings = Settings(_env_file=None)
    assert settings.database_backend == DatabaseBackend.JSON
    assert settings.database_url == "postgresql+asyncpg://u:p@host/db"
    assert settings.agent_max_iterations == 7
