from __future__ import annotations

import pytest
from pydantic import ValidationError

from signum_bot.core.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    hosts = settings.signum_hosts_list()
    assert hosts[0] == "https://europe1.signum.network"
    assert len(hosts) == 9
    assert settings.max_num_of_accounts == 6
    assert settings.faucet_secret_phrase == ""


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIGNUM_HOSTS", "https://node.example/ ; ;https://backup.example")
    monkeypatch.setenv("MAX_NUM_OF_ACCOUNTS", "3")
    monkeypatch.setenv("LISTENER_CONCURRENT_UPDATES", "true")
    settings = Settings(_env_file=None)
    assert settings.signum_hosts_list() == ["https://node.example", "https://backup.example"]
    assert settings.max_num_of_accounts == 3
    assert settings.listener_concurrent_updates is True


def test_settings_are_frozen() -> None:
    settings = Settings(_env_file=None)
    with pytest.raises(ValidationError):
        settings.log_level = "DEBUG"  # type: ignore[misc]
