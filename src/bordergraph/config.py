"""
Configuration & Preferences
===========================
Application identifiers and the small set of user preferences that survive
between runs (repulsion strength and theme). Layout is never stored.

Exports:
    Preferences: Dataclass holding the stored preferences.
    load_preferences / save_preferences: QSettings round trip.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from PySide6.QtCore import QSettings

from bordergraph.model.simulation import SimulationConfig, clamp_strength
from bordergraph.model.styling import Theme

logger = logging.getLogger(__name__)

ORG_ID = "bordergraph"
APP_ID = "country-borders"
VISIBLE_APP_NAME = "Interactive Country Borders Graph"
SUBTITLE = "Explore countries and their shared borders - Drag to move, scroll to zoom"

KEY_STRENGTH = "graph/strength"
KEY_THEME = "ui/theme"


@dataclass
class Preferences:
    strength: float = SimulationConfig.strength
    theme: Theme = Theme.LIGHT


def load_preferences(settings: Optional[QSettings] = None) -> Preferences:
    """Read preferences, falling back to defaults for missing or invalid values."""
    settings = settings or QSettings()
    defaults = Preferences()

    try:
        strength = clamp_strength(float(settings.value(KEY_STRENGTH, defaults.strength)))
    except (TypeError, ValueError):
        logger.warning("Stored strength is not a number, using default.")
        strength = defaults.strength

    try:
        theme = Theme(str(settings.value(KEY_THEME, defaults.theme.value)))
    except ValueError:
        logger.warning("Stored theme is unknown, using default.")
        theme = defaults.theme

    return Preferences(strength=strength, theme=theme)


def save_preferences(preferences: Preferences, settings: Optional[QSettings] = None) -> None:
    settings = settings or QSettings()
    settings.setValue(KEY_STRENGTH, float(preferences.strength))
    settings.setValue(KEY_THEME, Theme(preferences.theme).value)
    settings.sync()
    logger.debug(f"Preferences saved: {preferences}")
