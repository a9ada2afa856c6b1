"""Global configuration — project settings file, env vars, XDG paths, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from nohttp.errors import ConfigError
from nohttp.scanner.lines import DEFAULT_MAX_FILE_SIZE
from nohttp.scanner.models import DEFAULT_BUILD_DIR, ScanTarget

CONFIG_FILENAME = ".nohttp.yaml"
DEFAULT_WHITELIST_PATH = "config/nohttp/nohttp.txt"
DEFAULT_REPORT_DIR = "build/reports/checkstyleNohttp"


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "nohttp"
    return Path.home() / ".local" / "share" / "nohttp"


def _env_number(name: str, kind: type):
    value = os.environ.get(name)
    if not value:
        return None
    try:
        return kind(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


@dataclass
class NoHttpConfig:
    """Settings for one scan invocation.

    Relative ``roots``, ``whitelist_file`` and ``report_dir`` are resolved
    against ``project_dir``.
    """

    project_dir: Path = field(default_factory=Path.cwd)
    roots: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    whitelist_file: str | None = None
    build_dir: str = DEFAULT_BUILD_DIR
    workers: int | None = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    timeout: float | None = None
    report_dir: str = DEFAULT_REPORT_DIR
    reports: bool = True
    data_dir: Path = field(default_factory=_default_data_dir)

    @classmethod
    def load(
        cls,
        project_dir: str | Path = ".",
        config_file: str | Path | None = None,
    ) -> NoHttpConfig:
        """Load ``.nohttp.yaml`` (if any), then apply environment overrides."""
        config = cls(project_dir=Path(project_dir).resolve())

        path = Path(config_file) if config_file else config.project_dir / CONFIG_FILENAME
        if config_file or path.is_file():
            config._apply_file(path)

        env_workers = _env_number("NOHTTP_WORKERS", int)
        if env_workers is not None:
            config.workers = env_workers

        env_timeout = _env_number("NOHTTP_TIMEOUT", float)
        if env_timeout is not None:
            config.timeout = env_timeout

        env_max_size = _env_number("NOHTTP_MAX_FILE_SIZE", int)
        if env_max_size is not None:
            config.max_file_size = env_max_size

        return config

    def _apply_file(self, path: Path) -> None:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigError(f"Could not read {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")

        for key in ("roots", "include", "exclude"):
            value = data.get(key, [])
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ConfigError(f"{path}: '{key}' must be a list of strings")
            getattr(self, key).extend(str(v) for v in value)

        for key in ("whitelist", "build_dir", "report_dir"):
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"{path}: '{key}' must be a string")
        if "reports" in data and not isinstance(data["reports"], bool):
            raise ConfigError(f"{path}: 'reports' must be true or false")

        self.whitelist_file = data.get("whitelist", self.whitelist_file)
        self.build_dir = data.get("build_dir", self.build_dir)
        try:
            if data.get("workers") is not None:
                self.workers = int(data["workers"])
            if data.get("timeout") is not None:
                self.timeout = float(data["timeout"])
            self.max_file_size = int(data.get("max_file_size", self.max_file_size))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{path}: {e}") from e
        self.report_dir = data.get("report_dir", self.report_dir)
        self.reports = data.get("reports", self.reports)

    def resolve_whitelist_path(self) -> Path | None:
        """The configured whitelist, else the conventional one if it exists."""
        if self.whitelist_file:
            return self._resolve(self.whitelist_file)
        default = self.project_dir / DEFAULT_WHITELIST_PATH
        return default if default.is_file() else None

    def resolve_report_dir(self) -> Path:
        return self._resolve(self.report_dir)

    def to_target(self) -> ScanTarget:
        roots = self.roots or ["."]
        return ScanTarget(
            roots=tuple(str(self._resolve(r)) for r in roots),
            include=tuple(self.include),
            exclude=tuple(self.exclude),
            build_dir=self.build_dir,
        )

    def _resolve(self, value: str | Path) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.project_dir / path
        return path
