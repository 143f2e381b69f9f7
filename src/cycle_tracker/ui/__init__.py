"""User interface: display window and HUD."""

from cycle_tracker.ui.display import DisplayWindow, KeyAction
from cycle_tracker.ui.hud import HUDRenderer

__all__ = ["DisplayWindow", "KeyAction", "HUDRenderer"]
