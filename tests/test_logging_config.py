"""
Tests for logging and configuration helpers
"""

import json
import logging

from unittest.mock import patch

from token_orchestrator import config
from token_orchestrator.logging_config import JsonFormatter, setup_logging, trace_id_var


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("token_orchestrator.keystore", logging.INFO, __file__, 1,
                               "Key %s", ("issued",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_trace_and_extra():
    token = trace_id_var.set("trace-1")
    try:
        entry = json.loads(JsonFormatter().format(_record(component="keystore", key_id="abc")))
    finally:
        trace_id_var.reset(token)

    assert entry["msg"] == "Key issued"
    assert entry["level"] == "INFO"
    assert entry["logger"] == "token_orchestrator.keystore"
    assert entry["trace_id"] == "trace-1"
    assert entry["component"] == "keystore"
    assert entry["key_id"] == "abc"
    assert entry["timestamp"].endswith("Z")


def test_setup_logging_text_format(tmp_path):
    with patch.object(config, "LOG_CONFIG_FILE", str(tmp_path / "missing.yaml")):
        cfg = setup_logging(log_level="debug", log_format="text")
    assert cfg["handlers"]["console"]["formatter"] == "text"
    assert logging.getLogger("token_orchestrator").level == logging.DEBUG


def test_setup_logging_from_yaml(tmp_path):
    path = tmp_path / "LOGGING.yaml"
    path.write_text(
        "version: 1\n"
        "disable_existing_loggers: false\n"
        "handlers:\n"
        "  console:\n"
        "    class: logging.StreamHandler\n"
        "loggers:\n"
        "  token_orchestrator:\n"
        "    level: INFO\n"
        "    handlers: [console]\n"
    )
    with patch.object(config, "LOG_CONFIG_FILE", str(path)):
        cfg = setup_logging(log_level="WARNING", log_format="json")
    assert cfg["loggers"]["token_orchestrator"]["level"] == "WARNING"
    assert logging.getLogger("token_orchestrator").level == logging.WARNING


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("TO_FLAG", "Yes")
    monkeypatch.setenv("TO_SECONDS", "12.5")
    monkeypatch.setenv("TO_BAD", "soon")
    assert config.env_bool("TO_FLAG") is True
    assert config.env_bool("TO_UNSET", True) is True
    assert config.env_float("TO_SECONDS", 1.0) == 12.5
    assert config.env_float("TO_BAD", 3.0) == 3.0
    assert config.env_float("TO_UNSET", 4.0) == 4.0
