"""
Unit tests for settings, logging setup, and identity tokens.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta

import jwt
import pytest
import structlog
from sqlalchemy import text
from sqlalchemy.pool import StaticPool

from app.core.auth import create_identity_token, decode_identity_token
from app.core.config import Settings
from app.core.database import build_engine
from app.core.logging import setup_logging


class TestSettings:

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("VH_PORT", "9100")
        monkeypatch.setenv("VH_CORS_ORIGINS", '["https://hub.example.org"]')
        settings = Settings()
        assert settings.port == 9100
        assert settings.cors_origins == ["https://hub.example.org"]

    def test_rejects_unknown_environment(self, monkeypatch):
        monkeypatch.setenv("VH_ENVIRONMENT", "staging")
        with pytest.raises(ValueError):
            Settings()


class TestIdentityTokens:

    def test_round_trip_claims(self):
        token = create_identity_token("idp|abc", email="abc@example.org", name="Abc")
        claims = decode_identity_token(token)
        assert claims["sub"] == "idp|abc"
        assert claims["email"] == "abc@example.org"

    def test_expired_token(self):
        token = create_identity_token("idp|abc", expires_delta=timedelta(seconds=-1))
        with pytest.raises(jwt.ExpiredSignatureError):
            decode_identity_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "idp|abc", "exp": 4102444800}, "another-secret-of-sufficient-size", algorithm="HS256")
        with pytest.raises(jwt.InvalidSignatureError):
            decode_identity_token(token)


class TestLogging:

    def test_json_output(self, capsys):
        setup_logging(level="INFO", json_format=True)
        structlog.get_logger("test").info("signup.approved", signup_id="s-1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "signup.approved"
        assert record["signup_id"] == "s-1"
        assert record["level"] == "info"

    def test_level_applied(self):
        setup_logging(level="WARNING", json_format=False)
        assert logging.getLogger().level == logging.WARNING


class TestEngine:

    @pytest.mark.asyncio
    async def test_sqlite_enforces_foreign_keys(self):
        engine = build_engine("sqlite+aiosqlite://")
        try:
            assert isinstance(engine.pool, StaticPool)
            async with engine.connect() as conn:
                result = await conn.execute(text("PRAGMA foreign_keys"))
                assert result.scalar() == 1
        finally:
            await engine.dispose()
