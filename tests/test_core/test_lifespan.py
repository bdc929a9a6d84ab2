import asyncio
import logging
from unittest.mock import MagicMock

from fastapi import FastAPI

from shop_api.main import lifespan


def _run(app):
    async def run_lifespan():
        async with lifespan(app):
            pass

    asyncio.run(run_lifespan())


def test_lifespan_database_ok(monkeypatch):
    mock_conn = MagicMock()
    mock_engine = MagicMock()
    mock_engine.connect.return_value.__enter__.return_value = mock_conn
    init_db = MagicMock()
    monkeypatch.setattr("shop_api.main.engine", mock_engine)
    monkeypatch.setattr("shop_api.main.init_db", init_db)

    _run(FastAPI())

    mock_engine.connect.assert_called()
    mock_conn.execute.assert_called_once()
    init_db.assert_called_once()
    mock_engine.dispose.assert_called_once()


def test_lifespan_database_fail(monkeypatch, caplog):
    mock_engine = MagicMock()
    mock_engine.connect.side_effect = Exception("fail")
    init_db = MagicMock()
    monkeypatch.setattr("shop_api.main.engine", mock_engine)
    monkeypatch.setattr("shop_api.main.init_db", init_db)

    with caplog.at_level(logging.ERROR):
        _run(FastAPI())

    assert "database connectivity check failed" in caplog.text
    init_db.assert_not_called()
    mock_engine.dispose.assert_called_once()
