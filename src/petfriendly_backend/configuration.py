from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

_HERE = Path(__file__).resolve()
_CANDIDATE_CONFIG_PATHS = [parent / "config/config.yaml" for parent in _HERE.parents[:3]]

if os.environ.get("PETFRIENDLY_CONFIG"):
    _CANDIDATE_CONFIG_PATHS.insert(0, Path(os.environ["PETFRIENDLY_CONFIG"]))

CONFIG_PATH = next((path for path in _CANDIDATE_CONFIG_PATHS if path.exists()), None)
if CONFIG_PATH is None:  # pragma: no cover - fail fast in misconfigured environments
    raise FileNotFoundError("config.yaml could not be located; set PETFRIENDLY_CONFIG or reinstall the package.")


@lru_cache(maxsize=1)
def _load_default_config() -> DictConfig:
    # Environment overrides are resolved through ${oc.env:...} in config.yaml.
    load_dotenv()
    config = OmegaConf.load(CONFIG_PATH)
    OmegaConf.set_struct(config, True)
    return config


def get_settings() -> DictConfig:
    """Return the resolved application configuration."""
    config = _load_default_config()
    OmegaConf.resolve(config)
    return config


def allowed_origins(settings: DictConfig) -> List[str]:
    raw = str(settings.cors.allowed_origins or "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]
