import os
from pathlib import Path

import pytest

from ui_actions.config import ActionConfig, load_config
from ui_actions.files import LocalFileService
from ui_actions.resolver import WaitStrategyFactory


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("UI_ACTIONS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


def test_defaults_without_file_or_env():
    config = load_config()

    assert config == ActionConfig()
    assert config.wait_strategy == "webDriverWait"
    assert config.headless is True


def test_toml_file_is_read(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text(
        "[ui_actions]\n"
        "wait_timeout = 5\n"
        "poll_interval = 0.2\n"
        "browser = \"firefox\"\n"
        "headless = false\n"
        "screenshot_dir = \"out/shots\"\n"
    )

    config = load_config(path)

    assert config.wait_timeout == 5.0
    assert config.poll_interval == 0.2
    assert config.browser == "firefox"
    assert config.headless is False
    assert config.screenshot_dir == Path("out/shots")


def test_default_file_is_picked_up(tmp_path):
    (tmp_path / "ui_actions.toml").write_text("[ui_actions]\nwait_strategy = \"fluentWait\"\n")

    assert load_config().wait_strategy == "fluentWait"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.toml"
    path.write_text("[ui_actions]\nwait_timeout = 5\nslow_mo = 10\n")
    monkeypatch.setenv("UI_ACTIONS_WAIT_TIMEOUT", "2.5")
    monkeypatch.setenv("UI_ACTIONS_HEADLESS", "no")
    monkeypatch.setenv("UI_ACTIONS_UNRELATED", "ignored")

    config = load_config(path)

    assert config.wait_timeout == 2.5
    assert config.headless is False
    assert config.slow_mo == 10


def test_missing_explicit_file_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.toml")


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError, match="colour"):
        ActionConfig.from_mapping({"colour": "blue"})


def test_invalid_wait_settings_are_rejected():
    with pytest.raises(ValueError):
        ActionConfig(wait_timeout=-1)
    with pytest.raises(ValueError):
        ActionConfig.from_mapping({"poll_interval": "0"})


def test_collaborators_from_config(tmp_path):
    config = ActionConfig(wait_timeout=4, poll_interval=0.4, screenshot_dir=tmp_path / "shots")

    resolver = WaitStrategyFactory.from_config(config).get_wait_strategy(config.wait_strategy)
    files = LocalFileService.from_config(config)

    assert (resolver.timeout, resolver.poll_interval) == (4, 0.4)
    assert files.screenshot_dir == tmp_path / "shots"
