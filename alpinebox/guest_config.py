"""Guest-side configuration for alpinebox."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from alpinebox.models.guest_config import GuestConfigModel
from alpinebox.paths import GuestPaths
from alpinebox.utils.logging import get_logger

logger = get_logger(__name__)


def load_config(config_path: Optional[Path] = None) -> GuestConfigModel:
    """Load configuration from a YAML file.

    A missing file yields the defaults. An unreadable or invalid file is
    logged as a warning and also yields the defaults, so a broken config
    never stops the machine from provisioning.

    Args:
        config_path: File to load. Defaults to GuestPaths.config_file().

    Returns:
        Validated GuestConfigModel
    """
    path = config_path or GuestPaths.config_file()
    if not path.exists():
        logger.debug(f"No config at {path}, using defaults")
        return GuestConfigModel()

    try:
        with open(path) as f:
            raw_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")
        return GuestConfigModel()

    if not isinstance(raw_config, dict):
        logger.warning(f"Config at {path} is not a mapping, using defaults")
        return GuestConfigModel()

    try:
        return GuestConfigModel.model_validate(raw_config)
    except ValidationError as e:
        logger.warning(f"Config validation errors in {path}: {e}")
        return GuestConfigModel()


# Singleton instance
_config: Optional[GuestConfigModel] = None


def get_config(config_path: Optional[Path] = None) -> GuestConfigModel:
    """Get the global guest configuration.

    Passing a path reloads from that file.
    """
    global _config
    if _config is None or config_path is not None:
        _config = load_config(config_path)
    return _config
