"""Routing table view."""

from enum import Enum
from typing import Optional

from pyre.formatting import clean_value, format_duration
from pyre.models import RouteEntry
from pyre.views.base import ListView
from pyre.views.list_controller import EventResult, KeyEvent, ListSpec
from pyre.views.sorting import SortColumn, SortTable, ip_key


class RouteSort(Enum):
    DESTINATION = "destination"
    PROTOCOL = "protocol"
    NEXTHOP = "nexthop"
    INTERFACE = "interface"


# Protocol filter cycle; "" shows every route
PROTOCOLS = ("", "connected", "static", "bgp", "ospf")

PROTOCOL_CODES = {
    "connected": "C",
    "static": "S",
    "local": "L",
    "bgp": "B",
    "ospf": "O",
}


def protocol_code(route: RouteEntry) -> str:
    protocol = route.protocol or "static"
    return PROTOCOL_CODES.get(protocol, protocol)


def nexthop_label(route: RouteEntry) -> str:
    if not route.nexthop or route.nexthop == "directly connected":
        return "direct"
    return route.nexthop


ROUTE_SORT = SortTable(
    fields=RouteSort,
    columns={
        RouteSort.DESTINATION: SortColumn(
            "Destination", lambda r: ip_key(r.destination), tiebreak=lambda r: r.virtual_router.casefold()
        ),
        RouteSort.PROTOCOL: SortColumn("Protocol", lambda r: r.protocol, tiebreak=lambda r: ip_key(r.destination)),
        RouteSort.NEXTHOP: SortColumn("Next Hop", lambda r: ip_key(r.nexthop)),
        RouteSort.INTERFACE: SortColumn("Interface", lambda r: r.interface.casefold()),
    },
    default_ascending={
        RouteSort.DESTINATION: True,
        RouteSort.PROTOCOL: True,
        RouteSort.NEXTHOP: True,
        RouteSort.INTERFACE: True,
    },
)

ROUTES_SPEC: ListSpec[RouteEntry] = ListSpec(
    name="routes",
    extractors=(
        lambda r: r.destination,
        lambda r: r.nexthop,
        lambda r: r.interface,
        lambda r: r.protocol,
        lambda r: r.virtual_router,
    ),
    sort_table=ROUTE_SORT,
    initial_sort=RouteSort.DESTINATION,
    overhead=8,
    expanded_overhead=12,
    placeholder="Filter routes...",
    noun="routes",
)


class RoutesView(ListView[RouteEntry]):
    """Routes across every virtual router, with a protocol filter on ``p``."""

    spec = ROUTES_SPEC
    title = "Routes"
    help_bindings = (
        ("j/k", "navigate"),
        ("/", "filter"),
        ("p", "protocol"),
        ("s", "sort"),
        ("enter", "details"),
        ("r", "refresh"),
    )

    def __init__(self) -> None:
        super().__init__()
        self.protocol = ""

    def set_protocol(self, protocol: str) -> None:
        self.protocol = protocol
        if protocol:
            self.list.set_predicate(lambda route: route.protocol == protocol)
        else:
            self.list.set_predicate(None)

    def next_protocol(self) -> str:
        index = PROTOCOLS.index(self.protocol) if self.protocol in PROTOCOLS else -1
        self.set_protocol(PROTOCOLS[(index + 1) % len(PROTOCOLS)])
        return self.protocol

    def handle_view_key(self, event: KeyEvent) -> Optional[EventResult]:
        if event.key == "p":
            self.next_protocol()
            return EventResult(self.list.state)
        return None

    def summary(self) -> str:
        text = super().summary()
        routers = {r.virtual_router for r in self.list.raw if r.virtual_router}
        if routers:
            text = f"{text} in {len(routers)} virtual routers"
        if self.protocol:
            text = f"{text} | protocol: {self.protocol}"
        return text

    def detail_lines(self, route: RouteEntry) -> list[tuple[str, str]]:
        return [
            ("Destination", route.destination),
            ("Next hop", nexthop_label(route)),
            ("Interface", clean_value(route.interface)),
            ("Protocol", route.protocol),
            ("Metric", str(route.metric) if route.metric else ""),
            ("Virtual router", clean_value(route.virtual_router)),
            ("Flags", clean_value(route.flags)),
            ("Age", format_duration(route.age) if route.age else ""),
        ]
