import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from .models import QuoteWindow
from .resources import get_defaults_path

logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = "ONVISTA_QUOTES_CONFIG"
ENV_BASE_URL = "ONVISTA_QUOTES_BASE_URL"
ENV_MONTHS = "ONVISTA_QUOTES_MONTHS"


class StrictSafeLoader(yaml.SafeLoader):
    """YAML Loader that disallows duplicate keys."""

    def construct_mapping(self, node, deep=False):
        keys = []
        for key_node, _value_node in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in keys:
                raise yaml.constructor.ConstructorError(
                    f"Duplicate key found in YAML: {key}", key_node.start_mark
                )
            keys.append(key)
        return super().construct_mapping(node, deep=deep)


class HttpSettings(BaseModel):
    timeout: float | None = Field(None, gt=0, description="Total request timeout in seconds")


class SearchSettings(BaseModel):
    limit: int = Field(2, ge=1, description="Result cap passed to the instrument search")


class QuoteSettings(BaseModel):
    months: int = Field(3, ge=1, description="How many months of history to request")
    range_token: str | None = Field(None, description="Upstream range token, M<months> if unset")


class Settings(BaseModel):
    base_url: str = "https://api.onvista.de/api/v1"
    http: HttpSettings = Field(default_factory=HttpSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    quotes: QuoteSettings = Field(default_factory=QuoteSettings)

    def url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    @property
    def window(self) -> QuoteWindow:
        return QuoteWindow(months=self.quotes.months, range_token=self.quotes.range_token)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            data = yaml.load(f, Loader=StrictSafeLoader)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Error loading {path}: top level must be a mapping")
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Path | None = None) -> Settings:
    """
    Builds Settings from the bundled defaults, an optional user file and the
    environment, in that order of precedence (later wins).
    """
    data = _read_yaml(get_defaults_path())

    if path is None and os.getenv(ENV_CONFIG_PATH):
        path = Path(os.environ[ENV_CONFIG_PATH])
    if path is not None:
        path = Path(path).expanduser()
        if not path.exists():
            raise ConfigError(f"Config file {path} does not exist")
        logger.debug(f"Loading settings from {path}")
        data = _merge(data, _read_yaml(path))

    if os.getenv(ENV_BASE_URL):
        data["base_url"] = os.environ[ENV_BASE_URL]
    if os.getenv(ENV_MONTHS):
        data = _merge(data, {"quotes": {"months": os.environ[ENV_MONTHS]}})

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
