"""
Loading and validation of the SitePress service configuration.
Pydantic describes the schema; YAML and JSON files are accepted.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LoginSelectors(BaseModel):
    """CSS selectors of the login form filled in on the first page."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    username_selector: str = 'input[name="username"]'
    password_selector: str = 'input[name="password"]'
    submit_selector: str = 'button[type="submit"]'


class PdfOptions(BaseModel):
    """Page setup handed to the browser when printing a page."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    format: str = "A4"
    print_background: bool = True
    margin: str = "20px"


class ServiceConfig(BaseModel):
    """Configuration of one SitePress process."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = Field("0.0.0.0", min_length=1, description="Interface to listen on.")
    port: int = Field(3000, ge=1, le=65535, description="TCP port to listen on.")
    cache_ttl: float = Field(15 * 60, gt=0, description="Lifetime of a cached artifact (seconds).")
    cache_sweep_interval: float = Field(
        60 * 60, gt=0, description="Interval between full cache sweeps (seconds)."
    )
    navigation_timeout: float = Field(30.0, gt=0, description="Timeout of one page load (seconds).")
    batch_size: int = Field(5, ge=1, description="Pages drawn from the frontier per batch.")
    headless: bool = Field(True, description="Run the browser without a window.")
    browser_args: List[str] = Field(
        default_factory=lambda: [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-extensions",
        ],
        description="Extra command line flags for chromium.",
    )
    blocked_resource_types: List[str] = Field(
        default_factory=lambda: ["image", "font", "media"],
        description="Resource types aborted while loading a page.",
    )
    content_selectors: List[str] = Field(
        default_factory=lambda: ["main", "article", ".content", "#content"],
        description="Candidates for the main content element, in priority order.",
    )
    login: LoginSelectors = Field(default_factory=LoginSelectors)
    pdf: PdfOptions = Field(default_factory=PdfOptions)
    fingerprint_includes_password: bool = Field(
        False, description="Make the password part of the cache key."
    )

    @field_validator("blocked_resource_types", "content_selectors", mode="before")
    def _strip_blank(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [item.strip() for item in v if isinstance(item, str) and item.strip()]
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"YAML top level must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Malformed JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"JSON top level must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ServiceConfig:
    """
    Read YAML or JSON and return a validated ServiceConfig.
    Without a path the default file is used when present, built-in defaults otherwise.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return ServiceConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return ServiceConfig(**data)
