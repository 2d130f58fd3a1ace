"""In-memory repository over the data directory.

The repository owns the process-wide cache of :class:`AppData`. Loading is
single-flight: while one thread builds, every other caller waits for that
same build. A successful build is kept until the process exits; a failed
build leaves the cache empty so the next call starts over.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, List, Optional

from sublookup.core.conf_files import (
    parse_org_config,
    parse_pin_map,
    parse_user_count_config,
    read_api_secret,
)
from sublookup.core.errors import CONFIG_MISSING, ConfigurationError
from sublookup.core.expiration import format_stamp
from sublookup.core.manifest import (
    ADDITIONAL,
    API_SECRET,
    MAIN,
    ORG_CONFIG,
    PAYMENT,
    PIN_CONFIG,
    USER_CONFIG,
    DataFile,
    DataManifest,
)
from sublookup.core.models import (
    AppData,
    DataSource,
    OrgConfig,
    Row,
    UserCountConfig,
    row_value,
)
from sublookup.core.tabular import (
    ADDITIONAL_HEADERS,
    MAIN_HEADERS,
    PAYMENT_HEADERS,
    load_rows,
)

logger = logging.getLogger(__name__)

Reader = Callable[[Path], str]
Clock = Callable[[], date]

EMPTY = "empty"
LOADING = "loading"
LOADED = "loaded"


def read_text(path: Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def _email_key(row: Row) -> str:
    return row_value(row, "Email").lower()


class _PendingBuild:
    """Result slot shared by every caller waiting on one build."""

    def __init__(self) -> None:
        self._done = threading.Event()
        self._data: Optional[AppData] = None
        self._error: Optional[BaseException] = None

    def resolve(self, data: AppData) -> None:
        self._data = data
        self._done.set()

    def fail(self, error: BaseException) -> None:
        self._error = error
        self._done.set()

    def wait(self) -> AppData:
        self._done.wait()
        if self._error is not None:
            raise self._error
        assert self._data is not None
        return self._data


class DataRepository:
    def __init__(
        self,
        manifest: DataManifest,
        *,
        reader: Reader = read_text,
        clock: Clock = date.today,
    ) -> None:
        self.manifest = manifest
        self._reader = reader
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Optional[AppData] = None
        self._pending: Optional[_PendingBuild] = None
        self._api_secret: Optional[str] = None

    # ------------------------------------------------------------------
    # cache
    # ------------------------------------------------------------------
    @property
    def state(self) -> str:
        with self._lock:
            if self._data is not None:
                return LOADED
            if self._pending is not None:
                return LOADING
            return EMPTY

    def get(self) -> AppData:
        """Return the cached data, building it on first use."""

        with self._lock:
            if self._data is not None:
                return self._data
            pending = self._pending
            owner = pending is None
            if owner:
                pending = self._pending = _PendingBuild()

        if not owner:
            return pending.wait()

        try:
            data = self.build()
        except BaseException as exc:
            logger.exception("data_load_failed")
            with self._lock:
                self._pending = None
            pending.fail(exc)
            raise

        with self._lock:
            self._data = data
            self._pending = None
        pending.resolve(data)
        return data

    def reset(self) -> None:
        with self._lock:
            self._data = None
            self._pending = None
            self._api_secret = None

    # ------------------------------------------------------------------
    # loading
    # ------------------------------------------------------------------
    def _read(self, data_file: DataFile) -> Optional[str]:
        try:
            return self._reader(data_file.path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "data_file_unreadable path=%s role=%s error=%s",
                data_file.path,
                data_file.role,
                exc,
            )
            return None

    def _load_org_configs(self) -> Dict[str, OrgConfig]:
        configs: Dict[str, OrgConfig] = {}
        for conf_file in self.manifest.by_role(ORG_CONFIG):
            text = self._read(conf_file)
            if text is None:
                continue
            conf = parse_org_config(text)
            if conf is None:
                logger.warning("org_config_invalid path=%s", conf_file.path)
                continue
            configs[conf_file.base_name] = conf
        return configs

    def _load_index(self, data_file: Optional[DataFile], headers, **kwargs) -> Dict[str, Row]:
        index: Dict[str, Row] = {}
        if data_file is None:
            return index
        text = self._read(data_file)
        if not text or not text.strip():
            return index
        for row in load_rows(text, data_file.path.name, headers, **kwargs):
            key = _email_key(row)
            if key:
                index[key] = row
        return index

    def _load_sources(self, known: Dict[str, OrgConfig]) -> List[DataSource]:
        grouped: Dict[str, List[Row]] = {}
        for csv_file in self.manifest.by_role(MAIN):
            if csv_file.base_name not in known:
                logger.debug("csv_unmatched path=%s base=%s", csv_file.path, csv_file.base_name)
                continue
            text = self._read(csv_file)
            if not text or not text.strip():
                continue
            rows = load_rows(text, csv_file.path.name, MAIN_HEADERS)
            if rows:
                grouped.setdefault(csv_file.base_name, []).extend(rows)

        sources: List[DataSource] = []
        for base_name, rows in grouped.items():
            index: Dict[str, Row] = {}
            for row in rows:
                key = _email_key(row)
                if key:
                    index[key] = row
            sources.append(
                DataSource(
                    base_name=base_name,
                    index=MappingProxyType(index),
                    row_count=len(rows),
                )
            )
        return sources

    def build(self) -> AppData:
        logger.info("data_load_start files=%d", len(self.manifest.files))
        conf_data = self._load_org_configs()
        sources = self._load_sources(conf_data)
        additional = self._load_index(
            self.manifest.single(ADDITIONAL), ADDITIONAL_HEADERS, org_optional=True
        )
        payment = self._load_index(self.manifest.single(PAYMENT), PAYMENT_HEADERS)
        data = AppData(
            data_sources=sources,
            additional_map=additional,
            payment_map=payment,
            conf_data=conf_data,
        )
        logger.info(
            "data_load_done sources=%d rows=%d additional=%d payment=%d",
            len(sources),
            data.total_rows,
            len(additional),
            len(payment),
        )
        return data

    # ------------------------------------------------------------------
    # control files
    # ------------------------------------------------------------------
    def user_count_config(self) -> UserCountConfig:
        conf_file = self.manifest.single(USER_CONFIG)
        text = self._read(conf_file) if conf_file else None
        if text is None:
            logger.warning("user_conf_missing using_defaults=1")
            return UserCountConfig()
        return parse_user_count_config(text)

    def pin_map(self) -> Dict[str, str]:
        conf_file = self.manifest.single(PIN_CONFIG)
        text = self._read(conf_file) if conf_file else None
        if text is None:
            logger.warning("pin_conf_missing")
            return {}
        return parse_pin_map(text)

    def api_secret(self) -> str:
        if self._api_secret is not None:
            return self._api_secret
        secret_file = self.manifest.single(API_SECRET)
        if secret_file is None:
            logger.error("api_secret_missing")
            raise ConfigurationError(CONFIG_MISSING, "API key is not configured.")
        self._api_secret = read_api_secret(secret_file.path, self._reader)
        return self._api_secret

    def today(self) -> str:
        return format_stamp(self._clock())


__all__ = ["DataRepository", "read_text", "EMPTY", "LOADING", "LOADED"]
