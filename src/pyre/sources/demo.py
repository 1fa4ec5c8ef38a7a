"""Deterministic sample data for running Pyre without a device."""

import random
from datetime import datetime, timedelta
from typing import Optional

from pyre.models import (
    ARPEntry,
    GlobalProtectUser,
    Interface,
    IPSecTunnel,
    NATRule,
    RouteEntry,
    SecurityRule,
    Session,
    SourceTranslation,
    utcnow,
)
from pyre.sources.base import CallableSource


_INTERFACES = [
    # name, zone, ip, state, type, virtual router
    ("ethernet1/1", "untrust", "203.0.113.1/24", "up", "ethernet", "default"),
    ("ethernet1/2", "trust", "192.168.1.1/24", "up", "ethernet", "default"),
    ("ethernet1/3", "dmz", "10.0.0.1/24", "up", "ethernet", "default"),
    ("ethernet1/4", "", "", "down", "ethernet", ""),
    ("ethernet1/5", "guest", "172.16.10.1/24", "up", "ethernet", "guest-vr"),
    ("ethernet1/6", "", "", "down", "ethernet", ""),
    ("ae1", "trust", "192.168.50.1/24", "up", "aggregate", "default"),
    ("ethernet1/2.100", "voice", "192.168.100.1/24", "up", "vlan", "default"),
    ("ethernet1/2.200", "iot", "192.168.200.1/24", "up", "vlan", "default"),
    ("loopback.1", "mgmt", "10.255.255.1/32", "up", "loopback", "default"),
    ("tunnel.1", "vpn", "169.254.10.1/30", "up", "tunnel", "default"),
    ("tunnel.2", "vpn", "169.254.10.5/30", "up", "tunnel", "default"),
    ("tunnel.3", "vpn", "169.254.10.9/30", "down", "tunnel", "default"),
]

_TUNNELS = [
    # name, gateway, state, encryption
    ("branch-nyc", "198.51.100.10", "up", "aes-256-gcm"),
    ("branch-sfo", "198.51.100.20", "up", "aes-256-gcm"),
    ("branch-chi", "198.51.100.30", "down", "aes-128-cbc"),
    ("aws-vpc-prod", "52.95.110.1", "up", "aes-256-cbc"),
    ("aws-vpc-dev", "52.95.110.2", "init", "aes-256-cbc"),
    ("azure-hub", "20.42.0.5", "up", "aes-256-gcm"),
    ("partner-acme", "203.0.113.200", "down", "3des"),
]

_GP_USERS = [
    # username, computer, gateway, region
    ("alice", "ALICE-LT01", "gw-east", "US"),
    ("bob", "BOB-MBP", "gw-west", "US"),
    ("carol", "CAROL-LT07", "gw-east", "CA"),
    ("dave", "DAVE-DESKTOP", "gw-eu", "DE"),
    ("erin", "ERIN-LT02", "gw-west", "US"),
    ("frank", "FRANK-SURFACE", "gw-eu", "FR"),
]

_ROUTES = [
    # destination, nexthop, interface, protocol, metric, virtual router
    ("0.0.0.0/0", "203.0.113.254", "ethernet1/1", "static", 10, "default"),
    ("203.0.113.0/24", "", "ethernet1/1", "connected", 0, "default"),
    ("192.168.1.0/24", "", "ethernet1/2", "connected", 0, "default"),
    ("10.0.0.0/24", "", "ethernet1/3", "connected", 0, "default"),
    ("192.168.50.0/24", "", "ae1", "connected", 0, "default"),
    ("10.20.0.0/16", "169.254.10.2", "tunnel.1", "bgp", 20, "default"),
    ("10.30.0.0/16", "169.254.10.6", "tunnel.2", "bgp", 20, "default"),
    ("172.31.0.0/16", "192.168.1.254", "ethernet1/2", "ospf", 110, "default"),
    ("10.255.255.1/32", "", "loopback.1", "local", 0, "default"),
    ("172.16.10.0/24", "", "ethernet1/5", "connected", 0, "guest-vr"),
    ("0.0.0.0/0", "172.16.10.254", "ethernet1/5", "static", 10, "guest-vr"),
]

_SECURITY_RULES = [
    # name, action, source zones, dest zones, applications, services, base hits (None = never hit)
    ("allow-dns", "allow", ["trust"], ["untrust"], ["dns"], ["application-default"], 91_200),
    ("allow-outbound", "allow", ["trust", "voice"], ["untrust"], ["any"], ["application-default"], 1_245_000),
    ("allow-dmz-web", "allow", ["untrust"], ["dmz"], ["web-browsing", "ssl"], ["service-https"], 48_300),
    ("vpn-to-trust", "allow", ["vpn"], ["trust"], ["any"], ["any"], 7_720),
    ("guest-internet", "allow", ["guest"], ["untrust"], ["web-browsing", "ssl"], ["application-default"], 15_400),
    ("block-iot-lateral", "deny", ["iot"], ["trust", "dmz"], ["any"], ["any"], 310),
    ("legacy-ftp", "allow", ["trust"], ["dmz"], ["ftp"], ["application-default"], None),
    ("interzone-default", "drop", ["any"], ["any"], ["any"], ["any"], 2_050),
]

_NAT_RULES = [
    # name, source zones, dest zone, translation, translated source, translated dest, dest port, base hits
    ("outbound-pat", ["trust", "voice"], "untrust", SourceTranslation.DYNAMIC_IP_AND_PORT, "ethernet1/1", "", "", 880_000),
    ("guest-pat", ["guest"], "untrust", SourceTranslation.DYNAMIC_IP_AND_PORT, "ethernet1/5", "", "", 12_900),
    ("dmz-web-in", ["untrust"], "untrust", SourceTranslation.NONE, "", "10.0.0.20", "443", 41_700),
    ("mail-static", ["dmz"], "untrust", SourceTranslation.STATIC_IP, "203.0.113.25", "", "", 3_300),
    ("lab-pool", ["trust"], "untrust", SourceTranslation.DYNAMIC_IP, "203.0.113.128/28", "", "", None),
]

_APPS = [
    ("web-browsing", "tcp", 80),
    ("ssl", "tcp", 443),
    ("dns", "udp", 53),
    ("ssh", "tcp", 22),
    ("ms-office365", "tcp", 443),
    ("ntp", "udp", 123),
    ("slack-base", "tcp", 443),
    ("zoom", "udp", 8801),
]

_USERS = ["", "corp\\alice", "corp\\bob", "corp\\carol", ""]


class DemoFirewall:
    """A fake firewall whose counters grow a little on every fetch.

    Args:
        seed: Seed for the session table generator.
        session_count: Number of sessions in the session table.
        session_limit: Most sessions returned per fetch, 0 for no limit.
        now: Fixed clock, mostly for tests.
    """

    def __init__(
        self,
        seed: int = 7,
        session_count: int = 60,
        session_limit: int = 0,
        now: Optional[datetime] = None,
    ):
        self.seed = seed
        self.session_count = session_count
        self.session_limit = session_limit
        self._now = now
        self.fetches = 0
        self.fail_with: Optional[str] = None

    def now(self) -> datetime:
        return self._now or utcnow()

    def _tick(self) -> int:
        if self.fail_with:
            raise ConnectionError(self.fail_with)
        self.fetches += 1
        return self.fetches

    def interfaces(self) -> list[Interface]:
        tick = self._tick()
        rows = []
        for n, (name, zone, ip, state, kind, vr) in enumerate(_INTERFACES, start=1):
            up = state == "up"
            traffic = (n * 7_340_032 + tick * n * 65_536) if up else 0
            rows.append(
                Interface(
                    name=name,
                    state=state,
                    speed="1000" if up and kind == "ethernet" else "",
                    duplex="full" if up and kind == "ethernet" else "",
                    zone=zone,
                    ip=ip,
                    mac=f"00:1b:17:00:01:{n:02x}",
                    vsys="vsys1",
                    type=kind,
                    tag=int(name.rsplit(".", 1)[1]) if kind == "vlan" else 0,
                    bytes_in=traffic,
                    bytes_out=traffic // 3,
                    packets_in=traffic // 900,
                    packets_out=traffic // 2700,
                    errors_in=n % 3 if up else 0,
                    drops_in=n % 5 if up else 0,
                    mtu=1500,
                    virtual_router=vr,
                    mode="layer3",
                )
            )
        return rows

    def arp_entries(self) -> list[ARPEntry]:
        self._tick()
        entries = []
        for n, (name, _zone, ip, state, _kind, _vr) in enumerate(_INTERFACES, start=1):
            if state != "up" or not ip or ip.endswith("/32") or name.startswith("tunnel"):
                continue
            prefix = ip.split("/", 1)[0].rsplit(".", 1)[0]
            for host in (10, 11):
                entries.append(
                    ARPEntry(
                        interface=name,
                        ip=f"{prefix}.{host}",
                        mac=f"00:50:56:{n:02x}:00:{host:02x}",
                        status="c",
                        ttl=1800 - host,
                    )
                )
        return entries

    def sessions(self) -> list[Session]:
        tick = self._tick()
        rng = random.Random(self.seed)
        now = self.now()
        rows = []
        count = self.session_count
        if self.session_limit > 0:
            count = min(count, self.session_limit)
        for n in range(count):
            app, proto, port = rng.choice(_APPS)
            age = rng.randint(1, 7200)
            inbound = rng.randint(200, 5_000_000)
            rows.append(
                Session(
                    id=10_000 + n * 3,
                    state="ACTIVE",
                    application=app,
                    protocol=proto,
                    source_ip=f"192.168.1.{rng.randint(10, 250)}",
                    source_port=rng.randint(1024, 65535),
                    dest_ip=f"{rng.randint(1, 223)}.{rng.randint(0, 255)}.{rng.randint(0, 255)}.{rng.randint(1, 254)}",
                    dest_port=port,
                    source_zone="trust",
                    dest_zone="untrust",
                    nat_source_ip="203.0.113.1",
                    nat_source_port=rng.randint(1024, 65535),
                    user=rng.choice(_USERS),
                    bytes_in=inbound + tick * 1024,
                    bytes_out=inbound // 4,
                    start_time=now - timedelta(seconds=age),
                    rule="allow-outbound" if app != "dns" else "allow-dns",
                )
            )
        return rows

    def tunnels(self) -> list[IPSecTunnel]:
        tick = self._tick()
        rows = []
        for n, (name, gateway, state, encryption) in enumerate(_TUNNELS, start=1):
            up = state == "up"
            traffic = n * 1_048_576 + tick * 4096 if up else 0
            rows.append(
                IPSecTunnel(
                    name=name,
                    gateway=gateway,
                    state=state,
                    local_ip="203.0.113.1",
                    remote_ip=gateway,
                    local_spi=f"0x{0xC0DE0000 + n:08X}" if up else "",
                    remote_spi=f"0x{0xBEEF0000 + n:08X}" if up else "",
                    protocol="ESP",
                    encryption=encryption,
                    auth="sha256",
                    bytes_in=traffic,
                    bytes_out=traffic // 2,
                    packets_in=traffic // 1200,
                    packets_out=traffic // 2400,
                    uptime=f"{n}d {n * 3 % 24}h" if up else "",
                    errors=0 if up else n,
                )
            )
        return rows

    def gp_users(self) -> list[GlobalProtectUser]:
        self._tick()
        now = self.now()
        rows = []
        for n, (username, computer, gateway, region) in enumerate(_GP_USERS, start=1):
            duration = n * 2700
            rows.append(
                GlobalProtectUser(
                    username=username,
                    domain="corp",
                    computer=computer,
                    client_ip=f"198.18.{n}.{20 + n}",
                    virtual_ip=f"10.200.0.{100 + n}",
                    gateway=gateway,
                    login_time=now - timedelta(seconds=duration),
                    duration=duration,
                    client_version="6.2.1",
                    source_region=region,
                )
            )
        return rows

    def routes(self) -> list[RouteEntry]:
        tick = self._tick()
        return [
            RouteEntry(
                destination=destination,
                nexthop=nexthop,
                interface=interface,
                protocol=protocol,
                metric=metric,
                virtual_router=vr,
                flags="A S" if protocol == "static" else "A C" if protocol == "connected" else "A",
                age=3600 * n + tick * 30 if protocol in ("bgp", "ospf") else 0,
            )
            for n, (destination, nexthop, interface, protocol, metric, vr) in enumerate(_ROUTES, start=1)
        ]

    def security_rules(self) -> list[SecurityRule]:
        tick = self._tick()
        now = self.now()
        rows = []
        for n, (name, action, from_zones, to_zones, apps, services, hits) in enumerate(_SECURITY_RULES, start=1):
            rows.append(
                SecurityRule(
                    name=name,
                    position=n,
                    disabled=hits is None,
                    description=f"{action} {', '.join(from_zones)} to {', '.join(to_zones)}",
                    tags=["internet"] if "untrust" in to_zones else ["internal"],
                    rule_type="interzone" if from_zones != to_zones else "intrazone",
                    action=action,
                    source_zones=from_zones,
                    sources=["any"],
                    dest_zones=to_zones,
                    destinations=["any"],
                    applications=apps,
                    services=services,
                    profile_group="default" if action == "allow" else "",
                    hit_count=0 if hits is None else hits + tick * n,
                    last_hit=None if hits is None else now - timedelta(minutes=n * 7),
                )
            )
        return rows

    def nat_rules(self) -> list[NATRule]:
        tick = self._tick()
        now = self.now()
        rows = []
        for n, (name, from_zones, to_zone, translation, source, dest, port, hits) in enumerate(_NAT_RULES, start=1):
            rows.append(
                NATRule(
                    name=name,
                    position=n,
                    disabled=hits is None,
                    tags=["outbound"] if not dest else ["inbound"],
                    source_zones=from_zones,
                    dest_zones=[to_zone],
                    sources=["any"],
                    destinations=["203.0.113.20"] if dest else ["any"],
                    service="service-https" if port else "any",
                    source_translation=translation.value,
                    translated_source=source,
                    translated_dest=dest,
                    translated_dest_port=port,
                    hit_count=0 if hits is None else hits + tick * n,
                    last_hit=None if hits is None else now - timedelta(minutes=n * 11),
                )
            )
        return rows

    def sources(self) -> dict[str, CallableSource]:
        """One row source per list view, keyed by view name."""
        return {
            "interfaces": CallableSource("interfaces", self.interfaces),
            "arp": CallableSource("arp", self.arp_entries),
            "routes": CallableSource("routes", self.routes),
            "policies": CallableSource("policies", self.security_rules),
            "nat": CallableSource("nat", self.nat_rules),
            "sessions": CallableSource("sessions", self.sessions),
            "tunnels": CallableSource("tunnels", self.tunnels),
            "gp_users": CallableSource("gp_users", self.gp_users),
        }
