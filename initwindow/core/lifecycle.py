# initwindow/core/lifecycle.py

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LifecycleState:
    """
    Owned by the controller, shared with the window.
    The close handler reads `is_quitting` to decide between hide-to-tray and exit.
    """

    is_quitting: bool = False
    auto_started: bool = False
