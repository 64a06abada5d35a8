"""
Layered YAML configuration.

``default_config.yaml`` provides the base settings; every ``*.yaml`` file in
the additional directory is loaded under a key named after the file
(``web_parser.yaml`` -> ``config["web_parser"]``). ``${VAR}`` references are
expanded from the environment, after ``.env`` has been loaded.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from .types import ConfigError, SelectorConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "default_config.yaml"
DEFAULT_CONFIG_DIR = Path("config") / "yaml_config"


def _read_yaml(path: Path) -> Any:
    text = os.path.expandvars(path.read_text(encoding="utf-8"))
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc


def load_config(
    default_path: Union[str, Path] = DEFAULT_CONFIG_PATH,
    extra_dir: Optional[Union[str, Path]] = DEFAULT_CONFIG_DIR,
) -> Dict[str, Any]:
    load_dotenv()
    config: Dict[str, Any] = {}

    default_path = Path(default_path)
    if default_path.exists():
        config = _read_yaml(default_path) or {}
        if not isinstance(config, dict):
            raise ConfigError(f"{default_path} must contain a mapping")
        logger.debug("Loaded default configuration from %s", default_path)
    else:
        logger.warning("Default config file %s does not exist", default_path)

    if extra_dir is not None and Path(extra_dir).is_dir():
        for path in sorted(Path(extra_dir).glob("*.yaml")):
            config[path.stem] = _read_yaml(path) or {}
            logger.debug("Loaded additional configuration from %s", path)
    return config


def dig(config: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    node: Any = config
    for key in keys:
        if not isinstance(node, Mapping) or key not in node:
            return default
        node = node[key]
    return node


def selectors_from_config(config: Mapping[str, Any]) -> SelectorConfig:
    """Required crawl settings live under ``web_parser.web_scraping``."""
    return SelectorConfig.from_mapping(dig(config, "web_parser", "web_scraping"))


@dataclass
class Settings:
    run_website_parser: bool = True
    run_save_to_text: bool = False
    run_save_to_json: bool = True
    run_save_to_csv: bool = True
    run_save_to_yaml: bool = True
    run_save_to_excel: bool = False
    run_save_product_files: bool = False
    output_dir: str = "output"
    yaml_dir: str = str(DEFAULT_CONFIG_DIR)
    excel_path: str = "output/products.xlsx"
    media_dir: str = "media/products"
    workers: int = 1
    limit: Optional[int] = None
    ignored: List[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> "Settings":
        settings = cls()
        for source in (dig(config, "default", default={}) or {}, overrides or {}):
            settings.apply(source)
        return settings

    def apply(self, values: Mapping[str, Any]) -> None:
        known = {f.name for f in fields(self)} - {"ignored"}
        for key, value in values.items():
            if key not in known:
                logger.warning("Invalid config key: %s", key)
                self.ignored.append(key)
                continue
            if value is None:
                continue
            setattr(self, key, value)

    def formats(self) -> List[str]:
        switches = {
            "text": self.run_save_to_text,
            "json": self.run_save_to_json,
            "csv": self.run_save_to_csv,
            "yaml": self.run_save_to_yaml,
        }
        return [fmt for fmt, enabled in switches.items() if enabled]
