"""
Application settings.

Defaults live in the CanvasSettings dataclass; user overrides are
persisted with QSettings under the "Sketch2Print" organization.
"""

from dataclasses import dataclass, fields
from typing import Optional
import logging

from PyQt6.QtCore import QSettings

logger = logging.getLogger(__name__)

ORGANIZATION = "Sketch2Print"
APPLICATION = "Sketch2Print"

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class CanvasSettings:
    """Defaults for new canvases, PDF export and logging."""
    default_width: float = 800.0
    default_height: float = 600.0
    duplicate_offset: float = 20.0
    min_page_size: float = 100.0
    max_page_size: float = 2000.0
    background_color: str = "#ffffff"
    optimize_pdf: bool = False
    log_level: str = "INFO"

    @classmethod
    def load(cls, settings: Optional[QSettings] = None) -> 'CanvasSettings':
        """Load settings, falling back to the defaults for missing keys."""
        if settings is None:
            settings = QSettings(ORGANIZATION, APPLICATION)

        values = {}
        defaults = cls()
        for f in fields(cls):
            default = getattr(defaults, f.name)
            try:
                values[f.name] = settings.value(f.name, default, type=type(default))
            except TypeError:
                logger.warning(f"Ignoring invalid stored setting {f.name}")
                values[f.name] = default

        loaded = cls(**values)
        loaded.validate()
        return loaded

    def save(self, settings: Optional[QSettings] = None) -> None:
        """Persist all settings."""
        if settings is None:
            settings = QSettings(ORGANIZATION, APPLICATION)
        for f in fields(self):
            settings.setValue(f.name, getattr(self, f.name))
        settings.sync()

    def validate(self) -> None:
        """Replace out-of-range values with the defaults."""
        defaults = CanvasSettings()
        if self.default_width <= 0 or self.default_height <= 0:
            self.default_width = defaults.default_width
            self.default_height = defaults.default_height
        if self.min_page_size <= 0 or self.max_page_size < self.min_page_size:
            self.min_page_size = defaults.min_page_size
            self.max_page_size = defaults.max_page_size
        if self.log_level.upper() not in LOG_LEVELS:
            self.log_level = defaults.log_level
        self.log_level = self.log_level.upper()
