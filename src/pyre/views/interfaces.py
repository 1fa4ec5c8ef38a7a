"""Network interfaces view."""

from enum import Enum
from typing import Iterable, Optional

from pyre.formatting import clean_value, format_bytes, format_number, format_packets
from pyre.models import ARPEntry, Interface
from pyre.views.base import ListView
from pyre.views.list_controller import ListSpec
from pyre.views.sorting import SortColumn, SortTable, ip_key


class InterfaceSort(Enum):
    NAME = "name"
    ZONE = "zone"
    STATE = "state"
    IP = "ip"


INTERFACE_SORT = SortTable(
    fields=InterfaceSort,
    columns={
        InterfaceSort.NAME: SortColumn("Name", lambda i: i.name.casefold()),
        InterfaceSort.ZONE: SortColumn("Zone", lambda i: i.zone.casefold(), tiebreak=lambda i: i.name.casefold()),
        InterfaceSort.STATE: SortColumn("State", lambda i: not i.is_up, tiebreak=lambda i: i.name.casefold()),
        InterfaceSort.IP: SortColumn("IP", lambda i: ip_key(i.ip)),
    },
)

INTERFACES_SPEC: ListSpec[Interface] = ListSpec(
    name="interfaces",
    extractors=(
        lambda i: i.name,
        lambda i: i.zone,
        lambda i: i.ip,
        lambda i: i.state,
        lambda i: i.type,
        lambda i: i.virtual_router,
    ),
    sort_table=INTERFACE_SORT,
    initial_sort=InterfaceSort.NAME,
    overhead=8,
    expanded_overhead=14,
    placeholder="Filter by name, zone, IP...",
    noun="interfaces",
)


class InterfacesView(ListView[Interface]):
    spec = INTERFACES_SPEC
    title = "Interfaces"

    def __init__(self) -> None:
        super().__init__()
        self._arp: list[ARPEntry] = []

    def set_arp(self, entries: Iterable[ARPEntry]) -> None:
        self._arp = list(entries)

    def arp_for(self, interface: Optional[Interface]) -> list[ARPEntry]:
        """ARP entries learned on ``interface``."""
        if interface is None:
            return []
        return [entry for entry in self._arp if entry.interface == interface.name]

    def summary(self) -> str:
        rows = self.list.raw
        up = sum(1 for i in rows if i.is_up)
        zones = {i.zone for i in rows if clean_value(i.zone)}
        total = sum(i.total_bytes for i in rows)
        text = f"{up} up, {len(rows) - up} down, {len(zones)} zones, {format_bytes(total)} total"
        if self.list.is_filtered:
            shown, _ = self.list.counts
            text = f"{shown} of {len(rows)} shown | {text}"
        return text

    def detail_lines(self, iface: Interface) -> list[tuple[str, str]]:
        lines = [
            ("Name", iface.name),
            ("State", iface.state),
            ("Type", clean_value(iface.type)),
            ("Mode", clean_value(iface.mode)),
            ("Zone", clean_value(iface.zone)),
            ("Virtual router", clean_value(iface.virtual_router)),
            ("IP", clean_value(iface.ip)),
            ("MAC", clean_value(iface.mac)),
            ("Speed/duplex", " / ".join(v for v in (clean_value(iface.speed), clean_value(iface.duplex)) if v)),
            ("MTU", str(iface.mtu) if iface.mtu else ""),
            ("Bytes in/out", f"{format_bytes(iface.bytes_in)} / {format_bytes(iface.bytes_out)}"),
            ("Packets in/out", f"{format_packets(iface.packets_in)} / {format_packets(iface.packets_out)}"),
            ("Errors/drops", f"{format_number(iface.errors_in + iface.errors_out)} / {format_number(iface.drops_in + iface.drops_out)}"),
        ]
        if iface.tag:
            lines.append(("VLAN tag", str(iface.tag)))
        if iface.comment:
            lines.append(("Comment", iface.comment))
        arp = self.arp_for(iface)
        if arp:
            lines.append(("ARP", ", ".join(f"{e.ip} ({e.mac})" for e in arp[:3])))
        return lines
