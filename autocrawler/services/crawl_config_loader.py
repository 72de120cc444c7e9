import logging
from typing import Any, Dict

import yaml

from autocrawler.domain.crawl_config import CrawlConfig, TraversalMode
from autocrawler.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_INT_FIELDS = ("page_limit", "start_id", "end_id")
_BOOL_FIELDS = ("summarize", "record_failures")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ConfigurationError(f"{name} must be a boolean")


def crawl_config_from_dict(data: Dict[str, Any]) -> CrawlConfig:
    """Build a CrawlConfig from a plain mapping (YAML document, API body).

    Keys: seed_url (required), mode, page_limit, start_id, end_id,
    summarize, record_failures. Unknown keys are ignored.
    """
    if not isinstance(data, dict):
        raise ConfigurationError("crawl config must be a mapping")

    seed_url = data.get("seed_url")
    if not seed_url or not isinstance(seed_url, str):
        raise ConfigurationError("seed_url is required")

    kwargs: Dict[str, Any] = {"seed_url": seed_url.strip()}
    if data.get("mode") is not None:
        try:
            kwargs["mode"] = TraversalMode(data["mode"])
        except ValueError as e:
            raise ConfigurationError(f"unknown mode {data['mode']!r}") from e
    for name in _INT_FIELDS:
        if data.get(name) is None:
            continue
        try:
            kwargs[name] = int(data[name])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{name} must be an integer") from e
    for name in _BOOL_FIELDS:
        if data.get(name) is not None:
            kwargs[name] = _parse_bool(name, data[name])
    return CrawlConfig(**kwargs)


def load_crawl_config(path: str) -> CrawlConfig:
    """Load a single crawl config from a YAML file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"cannot read crawl config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e

    logger.debug("Loaded crawl config from %s", path)
    return crawl_config_from_dict(data or {})
