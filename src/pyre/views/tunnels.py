"""IPSec tunnels view."""

from enum import Enum

from pyre.formatting import clean_value, format_bytes, format_packets
from pyre.models import IPSecTunnel
from pyre.views.base import ListView
from pyre.views.list_controller import ListSpec
from pyre.views.sorting import SortColumn, SortTable, ip_key, state_rank


class TunnelSort(Enum):
    NAME = "name"
    GATEWAY = "gateway"
    STATE = "state"
    TRAFFIC = "traffic"


TUNNEL_SORT = SortTable(
    fields=TunnelSort,
    columns={
        TunnelSort.NAME: SortColumn("Name", lambda t: t.name.casefold()),
        TunnelSort.GATEWAY: SortColumn("Gateway", lambda t: ip_key(t.gateway)),
        TunnelSort.STATE: SortColumn("State", lambda t: state_rank(t.state), tiebreak=lambda t: t.name.casefold()),
        TunnelSort.TRAFFIC: SortColumn("Traffic", lambda t: t.traffic),
    },
    default_ascending={
        TunnelSort.NAME: True,
        TunnelSort.GATEWAY: True,
        TunnelSort.STATE: True,  # up first
        TunnelSort.TRAFFIC: False,
    },
)

TUNNELS_SPEC: ListSpec[IPSecTunnel] = ListSpec(
    name="tunnels",
    extractors=(
        lambda t: t.name,
        lambda t: t.gateway,
        lambda t: t.state,
        lambda t: t.protocol,
        lambda t: t.encryption,
    ),
    sort_table=TUNNEL_SORT,
    initial_sort=TunnelSort.NAME,
    overhead=8,
    expanded_overhead=14,
    placeholder="Filter by name, gateway, state...",
    noun="tunnels",
)


class TunnelsView(ListView[IPSecTunnel]):
    spec = TUNNELS_SPEC
    title = "IPSec Tunnels"

    def summary(self) -> str:
        rows = self.list.raw
        up = sum(1 for t in rows if t.state.lower() == "up")
        text = f"{up}/{len(rows)} up"
        if self.list.is_filtered:
            shown, _ = self.list.counts
            text = f"{shown} shown | {text}"
        return text

    def detail_lines(self, tunnel: IPSecTunnel) -> list[tuple[str, str]]:
        return [
            ("Name", tunnel.name),
            ("State", tunnel.state),
            ("Gateway", clean_value(tunnel.gateway)),
            ("Local/remote IP", f"{clean_value(tunnel.local_ip)} / {clean_value(tunnel.remote_ip)}"),
            ("SPI in/out", f"{clean_value(tunnel.local_spi)} / {clean_value(tunnel.remote_spi)}"),
            ("Protocol", tunnel.protocol),
            ("Encryption", clean_value(tunnel.encryption)),
            ("Auth", clean_value(tunnel.auth)),
            ("Bytes in/out", f"{format_bytes(tunnel.bytes_in)} / {format_bytes(tunnel.bytes_out)}"),
            ("Packets in/out", f"{format_packets(tunnel.packets_in)} / {format_packets(tunnel.packets_out)}"),
            ("Uptime", clean_value(tunnel.uptime)),
            ("Errors", str(tunnel.errors)),
        ]
