import logging

import pytest

from chatdesk_core import main as entry
from chatdesk_core.infrastructure.logging.logger import logger

pytest.importorskip("tkinter")


def test_main_exits_on_missing_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CHATDESK_API_KEY", raising=False)
    monkeypatch.delenv("CHATDESK_CONFIG_FILE", raising=False)
    started = []
    monkeypatch.setattr("chatdesk_core.gui.app.run_app", lambda ctx: started.append(ctx))
    assert entry.main(["--config", str(tmp_path / "missing.json")]) == 1
    assert "Failed to load configuration" in capsys.readouterr().err
    assert started == []


def test_main_runs_gui_with_context(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CHATDESK_CONFIG_FILE", raising=False)
    cfg = tmp_path / "chatdesk.conf.secret.json"
    cfg.write_text('{"api_key": "sk-test-0123456789", "log_dir": "%s"}' % (tmp_path / "logs").as_posix(), encoding="utf-8")
    started = []
    monkeypatch.setattr("chatdesk_core.gui.app.run_app", lambda ctx: started.append(ctx))
    before = list(logger.handlers)
    try:
        assert entry.main([]) == 0
    finally:
        for h in logger.handlers[:]:
            if h not in before:
                logger.removeHandler(h)
                h.close()
        logger.setLevel(logging.NOTSET)
    ctx = started[0]
    assert ctx.settings.api_key == "sk-test-0123456789"
    assert ctx.store.list_conversations() == {}
    assert (tmp_path / "logs").is_dir()
