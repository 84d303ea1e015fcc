from api import state
from plugin.notifier import Notifier
from plugin.registry import PluginRegistry
from workflows.inbox_import import InboxImporter
from workflows.inbox_poller import InboxPoller


def get_importer() -> InboxImporter:
    return state.importer


def get_poller() -> InboxPoller:
    return state.poller


def get_registry() -> PluginRegistry:
    return state.registry


def get_notifier() -> Notifier:
    return state.notifier
