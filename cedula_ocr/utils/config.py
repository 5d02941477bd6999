"""Configuration management for the cédula OCR system.

Loads and validates YAML configuration with sensible defaults
for preprocessing, OCR and field extraction settings.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from cedula_ocr.models import ADDRESS_REGION, NormalizedRegion

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CEDULA_OCR_CONFIG"
DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class PreprocessingConfig(BaseModel):
    """Configuration for image preprocessing."""

    front_threshold: int = Field(default=100, ge=0, le=256)
    back_threshold: int = Field(default=120, ge=0, le=256)
    address_region: NormalizedRegion = ADDRESS_REGION


class OCRConfig(BaseModel):
    """Configuration for Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "spa"
    psm: int = 3


class ExtractionConfig(BaseModel):
    """Configuration for front and back text parsing."""

    min_birth_year: int = 1900
    name_tail_lines: int = Field(default=6, ge=1)
    address_lookahead: int = Field(default=5, ge=1)
    max_address_parts: int = Field(default=3, ge=1)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    The file is taken from ``path``, else from the ``CEDULA_OCR_CONFIG``
    environment variable, else ``configs/config.yaml``. A missing file
    yields the defaults.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated application configuration.

    Raises:
        pydantic.ValidationError: If the file holds invalid settings.
    """
    if path is None:
        path = Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH))

    if not path.exists():
        logger.info("No config file found at %s, using defaults", path)
        return AppConfig()

    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    config = AppConfig.model_validate(raw)
    logger.info("Loaded configuration from %s", path)
    return config
