import pytest

from jinplate.config import loader
from jinplate.config.settings import LEFT_DELIM_ENV_VAR, RIGHT_DELIM_ENV_VAR
from jinplate.logging_setup import configure_logging


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory, monkeypatch):
    """Keeps the user's own config file and delimiter env vars out of every test."""
    user_dir = tmp_path_factory.mktemp("user-config")
    monkeypatch.setattr(loader, "USER_CONFIG_FILE", user_dir / "config.toml")
    monkeypatch.delenv(LEFT_DELIM_ENV_VAR, raising=False)
    monkeypatch.delenv(RIGHT_DELIM_ENV_VAR, raising=False)
    configure_logging("warning")
    yield
