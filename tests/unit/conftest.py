"""
Unit test configuration.

Unit tests must not see the developer's environment: the project's .env file
is ignored and the service's own variables are cleared, so each test sets
exactly the config it needs with monkeypatch.setenv().
"""

import pytest

SERVICE_ENV_VARS = (
    "MONGODB_URI",
    "REDIS_URI",
    "JWT_SECRET",
    "GEO_LOOKUP_URL",
    "ENRICHMENT_WORKERS",
    "ENV",
    "SENTRY_DSN",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})
    for var in SERVICE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
