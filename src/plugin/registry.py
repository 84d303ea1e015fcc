from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from plugin.notifier import Notifier

logger = logging.getLogger(__name__)


class WidgetLocation(str, Enum):
    POPUP = "popup"
    FLOATING = "floating"
    SIDEBAR = "sidebar"


class WidgetRegistration(BaseModel):
    name: str
    location: WidgetLocation
    width: Optional[int] = None
    height: Optional[int] = None


class CommandRegistration(BaseModel):
    id: str
    name: str
    description: str = ""
    quick_code: Optional[str] = None


class PluginRegistry:
    """Widgets and commands a plugin registers with the host shell."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self.widgets: Dict[str, WidgetRegistration] = {}
        self.commands: Dict[str, CommandRegistration] = {}
        self._actions: Dict[str, Callable[[], Any]] = {}
        self.open_widgets: List[WidgetRegistration] = []

    def register_widget(
        self,
        name: str,
        location: WidgetLocation,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> WidgetRegistration:
        widget = WidgetRegistration(name=name, location=location, width=width, height=height)
        self.widgets[name] = widget
        return widget

    def register_command(
        self,
        id: str,
        name: str,
        action: Callable[[], Any],
        description: str = "",
        quick_code: Optional[str] = None,
    ) -> CommandRegistration:
        command = CommandRegistration(
            id=id, name=name, description=description, quick_code=quick_code
        )
        self.commands[id] = command
        self._actions[id] = action
        return command

    def find_command(self, key: str) -> Optional[CommandRegistration]:
        """Look up a command by id or quick code."""
        if key in self.commands:
            return self.commands[key]
        for command in self.commands.values():
            if command.quick_code == key:
                return command
        return None

    def invoke(self, key: str) -> Any:
        """Run a command; failures become a notice instead of an exception."""
        command = self.find_command(key)
        if command is None:
            raise KeyError(key)
        try:
            return self._actions[command.id]()
        except Exception as e:
            logger.exception(f"Command {command.id} failed")
            self.notifier.error(f"{command.name} failed: {e}")
            return None

    def open_popup(self, name: str) -> WidgetRegistration:
        widget = self.widgets.get(name)
        if widget is None:
            raise KeyError(name)
        self.open_widgets.append(widget)
        return widget

    def open_floating(self, name: str) -> WidgetRegistration:
        """Open ``name`` as a floating widget, falling back to a popup."""
        widget = self.widgets.get(name)
        if widget is not None and widget.location == WidgetLocation.FLOATING:
            self.open_widgets.append(widget)
            return widget
        return self.open_popup(name)


def activate(registry: PluginRegistry, process_daily_notes: Callable[[], Any]) -> None:
    registry.register_widget("inbox_sync", WidgetLocation.POPUP, width=350, height=500)
    registry.register_widget("inbox_sidebar", WidgetLocation.SIDEBAR)

    registry.register_command(
        id="inbox-sync",
        name="Inbox Sync",
        description="Open the Inbox Sync panel",
        quick_code="inbox",
        action=lambda: registry.open_floating("inbox_sync"),
    )
    registry.register_command(
        id="process-daily-notes",
        name="Process Daily Notes",
        description="Classify and tag today's Daily Doc",
        quick_code="classify",
        action=process_daily_notes,
    )

    registry.notifier.toast("Inbox Sync plugin loaded!")
