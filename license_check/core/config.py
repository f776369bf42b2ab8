import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Set

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Default configuration values
DEFAULT_CONFIG_PATH = "licensecheck.config.yaml"
DEFAULT_VENDOR_PATH = "./vendor/"
DEFAULT_LICENSE_FILES = ["LICENSE", "LICENSE.TXT", "LICENSE.MD", "COPYING"]
DEFAULT_TIMEOUT_SECONDS = 300.0
# Bounded so a large vendor tree does not exhaust the open-file limit
DEFAULT_MAX_WORKERS = 128
DEFAULT_ALLOW_LIST_FILENAME = ".license"
DEFAULT_CONFIDENCE_THRESHOLD = 0.8
DEFAULT_MATCH_POLICY = "highest_confidence"


class LicenseCheckConfig(BaseModel):
    """
    Central configuration model for a license check run.
    """
    vendor_path: str = Field(default=DEFAULT_VENDOR_PATH)
    output_path: Optional[str] = None
    license_files: List[str] = Field(default_factory=lambda: list(DEFAULT_LICENSE_FILES))
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    allow_list_path: Optional[str] = None
    restrict_to_comments: bool = True
    confidence_threshold: float = Field(default=DEFAULT_CONFIDENCE_THRESHOLD, ge=0.0, le=1.0)
    match_policy: Literal["highest_confidence", "last"] = DEFAULT_MATCH_POLICY
    abort_on_read_error: bool = True
    show_progress: bool = False

    @field_validator("license_files", mode="before")
    @classmethod
    def _split_license_files(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.split(",")
        return value

    @field_validator("license_files")
    @classmethod
    def _normalize_license_files(cls, value: List[str]) -> List[str]:
        # Lookup is case-insensitive; order is preserved, first match wins
        return [name.strip().upper() for name in value if name.strip()]

    def resolved_allow_list_path(self, vendor_path: Optional[str] = None) -> Path:
        """The allow-list file; by default `.license` beside the vendor directory."""
        if self.allow_list_path:
            return Path(self.allow_list_path)
        vendor = Path((vendor_path or self.vendor_path).rstrip("/\\") or ".")
        return vendor.parent / DEFAULT_ALLOW_LIST_FILENAME


def load_config(
    config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> LicenseCheckConfig:
    """
    Load configuration from file and overrides.

    Priority:
    1. CLI Arguments (if provided and not None)
    2. Config File (if provided or found at default path)
    3. Default Values

    Args:
        config_path: Path to the YAML config file. If None, tries 'licensecheck.config.yaml'.
        cli_args: Dictionary of CLI arguments to override config values.

    Returns:
        LicenseCheckConfig: The resolved configuration object.
    """
    config_data: Dict[str, Any] = {}

    target_path = config_path if config_path else DEFAULT_CONFIG_PATH
    path_obj = Path(target_path)

    if path_obj.exists() and path_obj.is_file():
        try:
            with open(path_obj, 'r', encoding='utf-8') as f:
                file_data = yaml.safe_load(f)
                if isinstance(file_data, dict):
                    config_data.update(file_data)
                elif file_data is not None:
                    logger.warning(f"Ignoring config file {target_path}: expected a mapping")
            logger.info(f"Loaded configuration from {target_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {target_path}: {e}")
    elif config_path:
        logger.warning(f"Config file not found at explicit path: {config_path}")
    else:
        logger.debug(f"No config file found at {DEFAULT_CONFIG_PATH}, using defaults.")

    if cli_args:
        for key, value in cli_args.items():
            if value is not None:
                config_data[key] = value

    return LicenseCheckConfig(**config_data)


def load_allow_list(path: Path) -> Set[str]:
    """
    Read the allowed license names, one per line.

    Blank lines and lines starting with '#' are skipped. A missing file means
    no restriction and yields an empty set.
    """
    allowed: Set[str] = set()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                license_name = line.strip()
                if not license_name or license_name.startswith("#"):
                    continue
                allowed.add(license_name)
    except FileNotFoundError:
        logger.debug(f"No allow-list at {path}, every license is accepted")
    except OSError as e:
        logger.warning(f"Could not read allow-list {path}: {e}; every license is accepted")
    return allowed
