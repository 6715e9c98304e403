import pytest

from calsplit.config import load_config


def test_missing_config_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("GOOGLE_CREDENTIALS_JSON", raising=False)
    monkeypatch.delenv("GOOGLE_TOKEN_JSON", raising=False)

    cfg = load_config(str(tmp_path / "missing.yaml"))

    assert cfg.calendar_id == "primary"
    assert cfg.log_level == "WARNING"
    assert cfg.send_updates == "none"
    assert cfg.google.token_json.endswith("token.json")


def test_config_values_and_env_override(tmp_path, monkeypatch):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        """
        calendar_id: team@example.com
        log_level: info
        send_updates: all
        google:
          credentials_json: /etc/calsplit/credentials.json
          token_json: /etc/calsplit/token.json
        """,
        encoding="utf-8",
    )
    monkeypatch.delenv("GOOGLE_CREDENTIALS_JSON", raising=False)
    monkeypatch.setenv("GOOGLE_TOKEN_JSON", str(tmp_path / "token.json"))

    cfg = load_config(str(cfg_path))

    assert cfg.calendar_id == "team@example.com"
    assert cfg.log_level == "INFO"
    assert cfg.send_updates == "all"
    assert cfg.google.credentials_json == "/etc/calsplit/credentials.json"
    assert cfg.google.token_json == str(tmp_path / "token.json")


def test_config_rejects_unknown_send_updates(tmp_path):
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("send_updates: sometimes\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(str(cfg_path))
