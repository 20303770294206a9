"""
Client configuration.

Settings can come from a dict, a JSON/YAML file, or ``OPENWIRE_*`` environment
variables. Authentication is deliberately not part of it; callers put whatever
headers their HTTP layer needs into ``headers``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, model_validator

from openwire.models.pagination import PageBounds

DEFAULT_BASE_URL = "https://api.openai.com/v1"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

_ENV_FIELDS = {
    "OPENWIRE_BASE_URL": "base_url",
    "OPENWIRE_TIMEOUT_SECONDS": "timeout_seconds",
    "OPENWIRE_MAX_PAGE_LIMIT": "max_page_limit",
    "OPENWIRE_DEFAULT_PAGE_LIMIT": "default_page_limit",
    "OPENWIRE_LOG_LEVEL": "log_level",
}


class ClientConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: PositiveFloat = 60.0
    headers: Dict[str, str] = Field(default_factory=dict)

    max_page_limit: PositiveInt = 100
    default_page_limit: Optional[PositiveInt] = None

    log_level: LogLevel = "INFO"

    @model_validator(mode="after")
    def _validate_page_limits(self) -> "ClientConfig":
        if self.default_page_limit is not None and self.default_page_limit > self.max_page_limit:
            raise ValueError("default_page_limit must not exceed max_page_limit")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientConfig":
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for var, name in _ENV_FIELDS.items():
            raw = env.get(var)
            if raw:
                values[name] = raw.upper() if name == "log_level" else raw
        return cls.model_validate(values)

    def page_bounds(self) -> PageBounds:
        return PageBounds(min_limit=1, max_limit=self.max_page_limit, default_limit=self.default_page_limit)


def load_client_config(
    config_path: Optional[str] = None,
    config_dict: Optional[Dict[str, Any]] = None,
) -> ClientConfig:
    """
    Load a ClientConfig from a dict or a JSON/YAML file.

    Args:
        config_path: Path to a .json, .yaml or .yml file
        config_dict: Configuration dictionary (takes precedence)

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If neither argument is given or the file type is unsupported
        pydantic.ValidationError: If the values are invalid
    """
    if config_dict is not None:
        return ClientConfig.model_validate(config_dict)
    if not config_path:
        raise ValueError("Either config_path or config_dict must be provided")

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, "r") as f:
        if config_file.suffix == ".json":
            data = json.load(f)
        elif config_file.suffix in (".yaml", ".yml"):
            try:
                import yaml
            except ImportError:
                raise ImportError(
                    "PyYAML required for YAML configs. "
                    "Install with: pip install openwire[yaml]"
                )
            data = yaml.safe_load(f)
        else:
            raise ValueError(
                f"Unsupported config format: {config_file.suffix}. "
                "Use .json or .yaml"
            )
    return ClientConfig.model_validate(data or {})
