#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management

Values come from the environment (prefix ``OPENAPI_DOCGEN_``) or a ``.env``
file in the project root. Only the command line reads these settings; the
converters receive explicit arguments.
"""

from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

PAGE_SIZES = ("A4", "LETTER")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings"""

    # ========== Output ==========
    default_format: str = "pdf"  # pdf | docx | word | confluence | adf

    # ========== Logging ==========
    log_level: str = "INFO"

    # ========== PDF Layout ==========
    page_size: str = "A4"  # A4 | LETTER
    toc_page_numbers: bool = True
    max_layout_passes: int = 3

    # ========== Fonts ==========
    unicode_fonts: bool = False  # Register DejaVu TTF fonts when available
    font_search_paths: List[str] = []

    class Config:
        env_prefix = "OPENAPI_DOCGEN_"
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_settings()

    def _validate_settings(self):
        """Validate enumerated values and bounds."""
        errors = []

        if self.page_size.upper() not in PAGE_SIZES:
            errors.append(f"page_size must be one of {list(PAGE_SIZES)}, got {self.page_size!r}")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {list(LOG_LEVELS)}, got {self.log_level!r}")

        if self.max_layout_passes < 1:
            errors.append(f"max_layout_passes must be at least 1, got {self.max_layout_passes}")

        if errors:
            raise ValueError(
                "Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors)
            )

    def pdf_options(self) -> dict:
        """Keyword options for the PDF converter"""
        return {
            "page_size": self.page_size,
            "toc_page_numbers": self.toc_page_numbers,
            "max_layout_passes": self.max_layout_passes,
            "unicode_fonts": self.unicode_fonts,
            "font_search_paths": list(self.font_search_paths),
        }


# Global settings instance
settings = Settings()
