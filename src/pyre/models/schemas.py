"""SQLModel schemas for the rows shown in Pyre's list views.

None of these are tables: rows arrive as complete snapshots from a row
source and live only as long as the view holding them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC so they compare with ``utcnow()``."""
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class ConnectionType(str, Enum):
    """Kinds of device a connection can point at."""

    FIREWALL = "firewall"
    PANORAMA = "panorama"


class RuleAction(str, Enum):
    """Security rule actions."""

    ALLOW = "allow"
    DENY = "deny"
    DROP = "drop"
    RESET_CLIENT = "reset-client"
    RESET_SERVER = "reset-server"
    RESET_BOTH = "reset-both"


class SourceTranslation(str, Enum):
    """Source NAT translation types."""

    NONE = "none"
    DYNAMIC_IP_AND_PORT = "dynamic-ip-and-port"
    DYNAMIC_IP = "dynamic-ip"
    STATIC_IP = "static-ip"


class Interface(SQLModel):
    """A network interface on the firewall."""

    name: str
    state: str = "down"  # up, down
    speed: str = ""
    duplex: str = ""  # full, half, auto
    zone: str = ""
    ip: str = ""
    mac: str = ""
    vsys: str = ""
    type: str = "ethernet"  # ethernet, vlan, loopback, tunnel, aggregate
    tag: int = 0  # VLAN tag

    # Counters
    bytes_in: int = 0
    bytes_out: int = 0
    packets_in: int = 0
    packets_out: int = 0
    errors_in: int = 0
    errors_out: int = 0
    drops_in: int = 0
    drops_out: int = 0

    mtu: int = 0
    virtual_router: str = ""
    mode: str = ""  # layer3, layer2, virtual-wire, tap
    comment: str = ""

    @property
    def is_up(self) -> bool:
        return self.state.lower() == "up"

    @property
    def total_bytes(self) -> int:
        return self.bytes_in + self.bytes_out


class ARPEntry(SQLModel):
    """An ARP table entry, shown in the interface detail panel."""

    interface: str
    ip: str
    mac: str = ""
    status: str = ""  # complete/c, incomplete/i
    ttl: int = 0


class RouteEntry(SQLModel):
    """An entry in a virtual router's routing table."""

    destination: str
    nexthop: str = ""
    metric: int = 0
    interface: str = ""
    protocol: str = "static"  # connected, static, local, bgp, ospf
    virtual_router: str = ""
    flags: str = ""
    age: int = 0  # seconds


class Session(SQLModel):
    """An active session in the firewall session table."""

    id: int
    state: str = "ACTIVE"
    application: str = ""
    protocol: str = "tcp"  # tcp, udp, icmp
    source_ip: str = ""
    source_port: int = 0
    dest_ip: str = ""
    dest_port: int = 0
    source_zone: str = ""
    dest_zone: str = ""
    nat_source_ip: str = ""
    nat_source_port: int = 0
    user: str = ""
    bytes_in: int = 0
    bytes_out: int = 0
    start_time: Optional[datetime] = None
    rule: str = ""

    @property
    def total_bytes(self) -> int:
        return self.bytes_in + self.bytes_out


class SecurityRule(SQLModel):
    """A security policy rule with its hit statistics."""

    name: str
    position: int = 0
    disabled: bool = False
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    rule_type: str = "universal"  # universal, intrazone, interzone
    action: str = RuleAction.ALLOW.value

    source_zones: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    source_users: list[str] = Field(default_factory=list)
    dest_zones: list[str] = Field(default_factory=list)
    destinations: list[str] = Field(default_factory=list)
    applications: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)

    profile_group: str = ""
    log_end: bool = True

    hit_count: int = 0


class NATRule(SQLModel):
    """A NAT policy rule."""

    name: str
    position: int = 0
    disabled: bool = False
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    source_zones: list[str] = Field(default_factory=list)
    dest_zones: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    destinations: list[str] = Field(default_factory=list)
    service: str = "any"
    dest_interface: str = ""

    source_translation: str = SourceTranslation.NONE.value
    translated_source: str = ""  # address, pool or interface
    translated_dest: str = ""
    translated_dest_port: str = ""

    hit_count: int = 0
    last_hit: Optional[datetime] = None


class IPSecTunnel(SQLModel):
    """An IPSec VPN tunnel."""

    name: str
    gateway: str = ""  # remote gateway IP
    state: str = "down"  # up, down, init
    local_ip: str = ""
    remote_ip: str = ""
    local_spi: str = ""
    remote_spi: str = ""
    protocol: str = "ESP"  # ESP, AH
    encryption: str = ""
    auth: str = ""
    bytes_in: int = 0
    bytes_out: int = 0
    packets_in: int = 0
    packets_out: int = 0
    uptime: str = ""
    errors: int = 0

    @property
    def traffic(self) -> int:
        """Total bytes in both directions."""
        return self.bytes_in + self.bytes_out


class GlobalProtectUser(SQLModel):
    """A user connected through GlobalProtect VPN."""

    username: str
    domain: str = ""
    computer: str = ""
    client_ip: str = ""
    virtual_ip: str = ""
    gateway: str = ""
    login_time: Optional[datetime] = None
    duration: int = 0  # seconds
    client_version: str = ""
    source_region: str = ""


class ConnectionEntry(SQLModel):
    """A configured connection displayed in the connection hub."""

    host: str
    type: str = ConnectionType.FIREWALL.value
    insecure: bool = False
    last_connected: Optional[datetime] = None
    last_user: str = ""
    is_default: bool = False
