"""Loading of the fiscal and economy model configurations.

Defaults ship with the package in `patrimoine/data/`.
"""

from __future__ import annotations

import json
import os
from importlib import resources
from typing import Any, Optional

from pydantic import ValidationError

from patrimoine.application.services.economy import EconomyConfig
from patrimoine.core.exceptions import ConfigurationError, DataLoadError
from patrimoine.core.logging import get_logger
from patrimoine.core.settings import get_settings
from patrimoine.domain.models.fiscal import FiscalConfig

log = get_logger(__name__)

DEFAULT_FISCAL_MODEL = "fiscal_model.json"
DEFAULT_ECONOMY_MODEL = "economy_model.json"


def _read_json(path: Optional[str | os.PathLike], default_name: str) -> Any:
    try:
        if path is None:
            text = resources.files("patrimoine.data").joinpath(default_name).read_text(encoding="utf-8")
        else:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        return json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        raise DataLoadError(f"Cannot load {path or default_name}: {e}") from e


def load_fiscal_config(path: Optional[str | os.PathLike] = None) -> FiscalConfig:
    """Load and validate the fiscal model configuration.

    Args:
        path: JSON file; `fiscal_config_path` from the settings, then the
            packaged defaults, when None

    Returns:
        Validated, immutable configuration

    Raises:
        DataLoadError: If the file is missing or not valid JSON
        ConfigurationError: If a value is invalid
    """
    if path is None:
        path = get_settings().fiscal_config_path
    data = _read_json(path, DEFAULT_FISCAL_MODEL)
    try:
        config = FiscalConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError("fiscal_model", str(e)) from e

    log.info(
        "fiscal_model_loaded",
        source=str(path or DEFAULT_FISCAL_MODEL),
        income_taxes=config.income_taxes.version.version,
        isf=config.isf.version.version,
    )
    return config


def load_economy_config(path: Optional[str | os.PathLike] = None) -> EconomyConfig:
    """Load and validate the economy randomizers configuration."""
    data = _read_json(path, DEFAULT_ECONOMY_MODEL)
    try:
        config = EconomyConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError("economy_model", str(e)) from e

    log.info("economy_model_loaded", source=str(path or DEFAULT_ECONOMY_MODEL))
    return config
