"""List views and the controller they share."""

from .command_palette import CATEGORY_ORDER, Command, CommandPalette, default_commands
from .connection_hub import ConnectionHubView
from .gp_users import GPUsersView
from .interfaces import InterfacesView
from .list_controller import (
    Effect,
    ErrorPolicy,
    EventResult,
    KeyEvent,
    ListController,
    ListMode,
    ListSpec,
    ListState,
)
from .nat_policies import NATPoliciesView
from .policies import SecurityPoliciesView
from .routes import RoutesView
from .sessions import SessionsView
from .tunnels import TunnelsView

__all__ = [
    "CATEGORY_ORDER",
    "Command",
    "CommandPalette",
    "ConnectionHubView",
    "Effect",
    "ErrorPolicy",
    "EventResult",
    "GPUsersView",
    "InterfacesView",
    "KeyEvent",
    "ListController",
    "ListMode",
    "ListSpec",
    "ListState",
    "NATPoliciesView",
    "RoutesView",
    "SecurityPoliciesView",
    "SessionsView",
    "TunnelsView",
    "default_commands",
]
