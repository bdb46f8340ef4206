"""
settings.py
-----------
Centralized constants for sheet decoding and playback.
"""

import os

from sprite_layers.core.services.config_manager import DATA_ROOT, load_config


# ===========================================================
# Playback & Decoding
# ===========================================================

class Animation:
    """Defaults for index building and runtime playback."""
    TICK_PERIOD: float = 0.1            # seconds per advance
    FILENAME_DELIMITER: str = "-"
    STRICT: bool = True                 # abort the whole build on a bad frame
    ORDINAL_POLICY: str = "trust"       # trust, sort, reject
    RESET_ON_REGAIN: bool = False
    TIMER_EPSILON: float = 1e-9

    ORDINAL_POLICIES = frozenset({"trust", "sort", "reject"})

    CONFIG_FILE: str = "animation.json"


def default_animation_settings() -> dict:
    """Build the settings dict from the class constants."""
    return {
        "tick_period": Animation.TICK_PERIOD,
        "filename_delimiter": Animation.FILENAME_DELIMITER,
        "strict": Animation.STRICT,
        "ordinal_policy": Animation.ORDINAL_POLICY,
        "reset_on_regain": Animation.RESET_ON_REGAIN,
    }


def load_animation_settings(filename: str = None, overrides: dict = None) -> dict:
    """
    Load animation settings, merged over the built-in defaults.

    Only the packaged config/animation.json is read unless a file is passed
    explicitly, so a stray animation.json in the working directory is ignored.

    Args:
        filename: Optional config file; defaults to the packaged animation.json
        overrides: Values applied on top of the file before validation

    Returns:
        dict with keys tick_period, filename_delimiter, strict,
        ordinal_policy and reset_on_regain

    Raises:
        ValueError: a value has the wrong type or is out of range
    """
    path = filename or os.path.join(DATA_ROOT, Animation.CONFIG_FILE)
    settings = load_config(path, default_animation_settings())
    settings.update(overrides or {})

    for key in ("strict", "reset_on_regain"):
        if not isinstance(settings[key], bool):
            raise ValueError(f"{key} must be true or false, got {settings[key]!r}")

    tick_period = settings["tick_period"]
    if isinstance(tick_period, bool) or not isinstance(tick_period, (int, float)):
        raise ValueError(f"tick_period must be a number, got {tick_period!r}")
    if tick_period <= 0:
        raise ValueError(f"tick_period must be positive, got {tick_period!r}")

    if not isinstance(settings["filename_delimiter"], str) or not settings["filename_delimiter"]:
        raise ValueError(f"filename_delimiter must be a non-empty string, got {settings['filename_delimiter']!r}")

    policy = settings["ordinal_policy"]
    if not isinstance(policy, str) or policy not in Animation.ORDINAL_POLICIES:
        raise ValueError(
            f"ordinal_policy must be one of {sorted(Animation.ORDINAL_POLICIES)}, "
            f"got {policy!r}"
        )

    return settings
