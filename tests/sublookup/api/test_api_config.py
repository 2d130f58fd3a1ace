from pathlib import Path

from sublookup.api.config import env_bool, env_int, env_list, get_app_config


def test_defaults(monkeypatch):
    for name in (
        "LOOKUP_DATA_DIR",
        "SECRET_KEY",
        "LOOKUP_ADMIN_ROLE",
        "LOOKUP_NOT_PAID_THRESHOLD",
        "LOOKUP_AUDIT_EXCLUDED",
        "LOOKUP_SESSION_HOURS",
        "CORS_ORIGINS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = get_app_config()
    assert cfg.data_dir == Path("public").resolve()
    assert cfg.admin_role == "admin"
    assert cfg.not_paid_threshold == 20250724
    assert cfg.audit_excluded_bases == ["blueskyy", "parvis"]
    assert cfg.cors_origins == []
    assert cfg.log_level == "INFO"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("LOOKUP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LOOKUP_ADMIN_ROLE", "root")
    monkeypatch.setenv("LOOKUP_NOT_PAID_THRESHOLD", "20260101")
    monkeypatch.setenv("LOOKUP_AUDIT_EXCLUDED", "demo, test ,")
    monkeypatch.setenv("LOOKUP_SESSION_HOURS", "2")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.example,http://b.example")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    cfg = get_app_config()
    assert cfg.data_dir == tmp_path.resolve()
    assert cfg.admin_role == "root"
    assert cfg.not_paid_threshold == 20260101
    assert cfg.audit_excluded_bases == ["demo", "test"]
    assert cfg.session_hours == 2
    assert cfg.cors_origins == ["http://a.example", "http://b.example"]
    assert cfg.log_level == "DEBUG"


def test_env_helpers(monkeypatch):
    monkeypatch.setenv("FLAG", "no")
    monkeypatch.setenv("NUM", "abc")
    monkeypatch.delenv("LIST", raising=False)
    assert env_bool("FLAG", True) is False
    assert env_bool("MISSING_FLAG_XYZ", True) is True
    assert env_int("NUM", 5) == 5
    assert env_list("LIST") == []


def test_blank_env_values_keep_defaults(monkeypatch):
    monkeypatch.setenv("LOOKUP_SECURE_COOKIES", "")
    monkeypatch.setenv("LOOKUP_SESSION_HOURS", "  ")
    monkeypatch.setenv("FLAG_OFF", " Off ")
    assert env_bool("LOOKUP_SECURE_COOKIES", False) is False
    assert env_int("LOOKUP_SESSION_HOURS", 24) == 24
    assert env_bool("FLAG_OFF", True) is False
    assert get_app_config().secure_cookies is False
