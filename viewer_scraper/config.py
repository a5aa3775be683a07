"""YAML config loader."""

import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml


@dataclass
class HttpConfig:
    timeout: int = 60
    connect_timeout: int = 30
    concurrency: int = 3
    user_agent: str = "ViewerScraper/1.0"
    max_file_size: int = 52428800

    def __post_init__(self):
        if (isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int)
                or self.concurrency < 1):
            raise ValueError(f"concurrency must be a positive integer, got {self.concurrency!r}")


@dataclass
class AppConfig:
    output_dir: str = "."
    log_dir: Optional[str] = "logs"
    platform: str = field(default_factory=lambda: sys.platform)
    cleanup_on_failure: bool = True
    http: HttpConfig = field(default_factory=HttpConfig)


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load settings from a YAML file, or return defaults when no path is given."""
    if config_path is None:
        return AppConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    http_raw = raw.get("http", {}) or {}
    http = HttpConfig(**{k: v for k, v in http_raw.items() if k in HttpConfig.__dataclass_fields__})

    defaults = AppConfig()
    return AppConfig(
        output_dir=str(raw.get("output_dir", defaults.output_dir)),
        log_dir=raw.get("log_dir", defaults.log_dir),
        platform=raw.get("platform", defaults.platform),
        cleanup_on_failure=bool(raw.get("cleanup_on_failure", defaults.cleanup_on_failure)),
        http=http,
    )
