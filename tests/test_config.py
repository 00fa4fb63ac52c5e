"""
Tests for application settings
"""
import pytest
from pydantic import ValidationError

from hydianflow.core.config import Settings


class TestDatabaseUrl:

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("postgres://u:p@db:5432/flow", "postgresql+asyncpg://u:p@db:5432/flow"),
            ("postgresql://u:p@db:5432/flow", "postgresql+asyncpg://u:p@db:5432/flow"),
            ("postgresql+asyncpg://u:p@db/flow", "postgresql+asyncpg://u:p@db/flow"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_url_is_made_async(self, raw, expected):
        assert Settings(DATABASE_URL=raw).DATABASE_URL == expected


class TestWebhookSettings:

    @pytest.mark.unit
    def test_defaults(self):
        s = Settings(GITHUB_WEBHOOK_SECRET="s3cret")

        assert s.WEBHOOK_MAX_BODY_BYTES == 1 << 20
        assert s.TASK_POSITION_STEP == 1000.0

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [0, -1])
    def test_body_limit_must_be_positive(self, value):
        with pytest.raises(ValidationError):
            Settings(WEBHOOK_MAX_BODY_BYTES=value)

    @pytest.mark.unit
    def test_empty_secret_warns(self):
        with pytest.warns(UserWarning, match="GITHUB_WEBHOOK_SECRET"):
            Settings(GITHUB_WEBHOOK_SECRET="")
