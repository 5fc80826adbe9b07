"""
Configuration for commitchart.

The set of tracked repositories is an explicit value handed to the pipeline,
either the built-in defaults or a YAML file.
"""
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml

from commitchart.errors import ConfigError


@dataclass(frozen=True)
class TrackedRepository:
    """A repository whose activity is charted."""

    url: str
    name: str


DEFAULT_REPOSITORIES = (
    TrackedRepository("https://github.com/linuxdeepin/dde-daemon", "DDE Daemon"),
    TrackedRepository("https://github.com/linuxdeepin/dde-dock", "DDE Dock"),
    TrackedRepository("https://github.com/linuxdeepin/dde-session-shell", "DDE Session Shell"),
)

DEFAULT_CACHE_PATH = Path("cache") / "data.json"
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_TIMEOUT = 600.0


@dataclass
class ChartConfig:
    """Everything a run needs to know besides the current time."""

    repositories: tuple[TrackedRepository, ...] = DEFAULT_REPOSITORIES
    cache_path: Path = DEFAULT_CACHE_PATH
    output_dir: Path = DEFAULT_OUTPUT_DIR
    image_format: str = "png"
    timeout: float = DEFAULT_TIMEOUT
    label_every: int = 13

    def __post_init__(self):
        self.repositories = tuple(self.repositories)
        self.cache_path = Path(self.cache_path)
        self.output_dir = Path(self.output_dir)

        seen = set()
        for repo in self.repositories:
            if repo.url in seen:
                raise ConfigError(f"Repository listed twice: {repo.url}")
            seen.add(repo.url)

        if self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
        if self.label_every < 1:
            raise ConfigError(f"label_every must be at least 1, got {self.label_every}")

    @property
    def urls(self) -> list[str]:
        """Repository identifiers in configuration order."""
        return [repo.url for repo in self.repositories]

    def find(self, key: str) -> Optional[TrackedRepository]:
        """Look up a repository by URL or display name."""
        for repo in self.repositories:
            if key in (repo.url, repo.name):
                return repo
        return None

    def with_overrides(self, **overrides) -> "ChartConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "ChartConfig":
        """
        Load configuration from a YAML file.

        Args:
            yaml_path: Path to the configuration file

        Returns:
            ChartConfig instance

        Example YAML:
            repositories:
              - url: https://github.com/linuxdeepin/dde-dock
                name: DDE Dock
            cache_path: cache/data.json
            output_dir: output
            image_format: png
            timeout: 600
        """
        try:
            with open(yaml_path) as f:
                config = yaml.safe_load(f) or {}
        except OSError as exc:
            raise ConfigError(f"Cannot open config {yaml_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {yaml_path}: {exc}") from exc

        if not isinstance(config, dict):
            raise ConfigError(f"{yaml_path} must contain a mapping")

        entries = config.get("repositories")
        if not entries:
            raise ConfigError(f"{yaml_path} lists no repositories")

        repositories = []
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("url") or not entry.get("name"):
                raise ConfigError(f"Repository entries need 'url' and 'name': {entry!r}")
            repositories.append(TrackedRepository(str(entry["url"]), str(entry["name"])))

        kwargs = {"repositories": tuple(repositories)}
        if "cache_path" in config:
            kwargs["cache_path"] = Path(config["cache_path"])
        if "output_dir" in config:
            kwargs["output_dir"] = Path(config["output_dir"])
        if "image_format" in config:
            kwargs["image_format"] = str(config["image_format"])
        if "timeout" in config:
            try:
                kwargs["timeout"] = float(config["timeout"])
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"Invalid timeout in {yaml_path}: {config['timeout']!r}") from exc
        if "label_every" in config:
            try:
                kwargs["label_every"] = int(config["label_every"])
            except (TypeError, ValueError) as exc:
                raise ConfigError(
                    f"Invalid label_every in {yaml_path}: {config['label_every']!r}"
                ) from exc

        return cls(**kwargs)
