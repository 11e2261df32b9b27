import pytest

from textchan.config.core import Core
from textchan.config.indicators import Indicators
from textchan.config.loader import load_raw_config


def test_toml_values_override_env(monkeypatch):
    monkeypatch.setenv("CUSTOM_TOKEN", "from-env")
    core = Core(
        {
            "textchan": {
                "http": {"token_env": "CUSTOM_TOKEN", "api_base": "https://chat.test/api/"},
                "cache": {"message_cache_max_size": 50},
            }
        }
    )

    assert core.TOKEN == "from-env"
    assert core.API_BASE == "https://chat.test/api"
    assert core.MESSAGE_CACHE_MAX_SIZE == 50


def test_typing_refresh_must_undercut_expiry():
    with pytest.raises(ValueError):
        Indicators({"textchan": {"typing": {"expiry": 5, "refresh_interval": 5}}})

    cfg = Indicators({"textchan": {"typing": {"expiry": 12, "refresh_interval": 8}}})
    assert (cfg.TYPING_EXPIRY, cfg.TYPING_REFRESH_INTERVAL) == (12.0, 8.0)


def test_loader_reads_toml_and_tolerates_missing(tmp_path):
    assert load_raw_config(tmp_path / "absent.toml") == {}

    path = tmp_path / "config.toml"
    path.write_text('[textchan.typing]\nexpiry = 11\n', encoding="utf-8")
    assert load_raw_config(path) == {"textchan": {"typing": {"expiry": 11}}}
