import pytest
from pydantic import ValidationError

from pumpchat.config import ChatSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("PUMPCHAT_ROOM_ID", "PUMPCHAT_USERNAME", "PUMPCHAT_CONFIG_FILE", "PUMPCHAT_HISTORY_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_follow_reference_policy():
    settings = ChatSettings(room_id="token-address")
    assert settings.username == "anonymous"
    assert settings.history_limit == 100
    assert settings.reconnect_max_attempts == 5
    assert settings.ack_ttl_seconds == 30.0
    assert settings.ack_sweep_interval_seconds == 10.0
    assert settings.origin == "https://pump.fun"
    assert str(settings.ws_url).startswith("wss://livechat.pump.fun/socket.io/")


@pytest.mark.parametrize("username", ["", "   ", None])
def test_blank_username_falls_back_to_anonymous(username):
    assert ChatSettings(room_id="r", username=username).username == "anonymous"


@pytest.mark.parametrize("room_id", ["", "   "])
def test_room_id_must_not_be_empty(room_id):
    with pytest.raises(ValidationError):
        ChatSettings(room_id=room_id)


def test_room_id_is_required():
    with pytest.raises(ValidationError):
        ChatSettings()


def test_history_limit_must_be_positive():
    with pytest.raises(ValidationError):
        ChatSettings(room_id="r", history_limit=0)


def test_settings_are_immutable():
    settings = ChatSettings(room_id="r")
    with pytest.raises(ValidationError):
        settings.room_id = "other"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PUMPCHAT_ROOM_ID", "env-room")
    monkeypatch.setenv("PUMPCHAT_HISTORY_LIMIT", "25")
    settings = ChatSettings(log_level="debug")
    assert settings.room_id == "env-room"
    assert settings.history_limit == 25
    assert settings.log_level == "DEBUG"


def test_yaml_config_file(monkeypatch, tmp_path):
    path = tmp_path / "client.yaml"
    path.write_text("room_id: yaml-room\nusername: narrator\nhistory_limit: 7\n", encoding="utf-8")
    monkeypatch.setenv("PUMPCHAT_CONFIG_FILE", str(path))

    settings = ChatSettings()

    assert settings.room_id == "yaml-room"
    assert settings.username == "narrator"
    assert settings.history_limit == 7
    assert settings.config_path == path


def test_config_file_must_hold_a_mapping(monkeypatch, tmp_path):
    path = tmp_path / "client.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("PUMPCHAT_CONFIG_FILE", str(path))
    with pytest.raises(ValueError):
        ChatSettings()
