"""
Core services exports.

Provides configuration loading and the event system.
"""

from sprite_layers.core.services.config_manager import load_config
from sprite_layers.core.services.event_manager import (
    get_events,
    reset_events,
    EventManager,
    BaseEvent,
    AnimationAdvancedEvent,
    AnimationTagChangedEvent,
)

__all__ = [
    # Config
    'load_config',
    # Events
    'get_events',
    'reset_events',
    'EventManager',
    'BaseEvent',
    'AnimationAdvancedEvent',
    'AnimationTagChangedEvent',
]
