import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

_logger = logging.getLogger("sublookup.config")
if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
    _logger.addHandler(handler)
_logger.setLevel(logging.INFO)


def env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag; blank values (``FLAG=`` in ``.env``) keep the default."""

    value = (os.getenv(name) or "").strip().lower()
    if not value:
        return default
    return value not in {"0", "false", "no", "off"}


def env_int(name: str, default: int) -> int:
    value = (os.getenv(name) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        _logger.warning("%s=%r is not an integer; using %d", name, value, default)
        return default


def env_list(name: str) -> list[str]:
    """Read a comma-separated environment variable into a list."""

    value = os.getenv(name)
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class AppConfig:
    """Application configuration loaded from the environment."""

    data_dir: Path
    secret_key: str = "change-me"
    admin_role: str = "admin"
    not_paid_threshold: int = 20250724
    audit_excluded_bases: list[str] = field(
        default_factory=lambda: ["blueskyy", "parvis"]
    )
    session_hours: int = 24
    secure_cookies: bool = False
    cors_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"


def get_app_config() -> AppConfig:
    """Load application configuration from environment variables."""

    data_dir = Path(os.getenv("LOOKUP_DATA_DIR", "public")).resolve()
    secret_key = os.getenv("SECRET_KEY", "change-me")
    admin_role = os.getenv("LOOKUP_ADMIN_ROLE", "admin").strip() or "admin"
    threshold = env_int("LOOKUP_NOT_PAID_THRESHOLD", 20250724)
    excluded = env_list("LOOKUP_AUDIT_EXCLUDED") or ["blueskyy", "parvis"]
    session_hours = env_int("LOOKUP_SESSION_HOURS", 24)
    secure_cookies = env_bool("LOOKUP_SECURE_COOKIES", False)
    cors_origins = env_list("CORS_ORIGINS")
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    _logger.info("LOOKUP_DATA_DIR=%s", data_dir)
    _logger.info("LOOKUP_NOT_PAID_THRESHOLD=%s", threshold)
    _logger.info("LOOKUP_AUDIT_EXCLUDED=%s", ",".join(excluded))
    if secret_key == "change-me":
        _logger.warning("SECRET_KEY is not set; sessions use the development key")

    return AppConfig(
        data_dir=data_dir,
        secret_key=secret_key,
        admin_role=admin_role,
        not_paid_threshold=threshold,
        audit_excluded_bases=excluded,
        session_hours=session_hours,
        secure_cookies=secure_cookies,
        cors_origins=cors_origins,
        log_level=log_level,
    )
