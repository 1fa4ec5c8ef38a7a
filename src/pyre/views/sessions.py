"""Active sessions view."""

from enum import Enum

from pyre.formatting import clean_value, format_ago, format_bytes
from pyre.models import Session
from pyre.views.base import ListView
from pyre.views.list_controller import ListSpec
from pyre.views.sorting import SortColumn, SortTable, time_key


class SessionSort(Enum):
    ID = "id"
    BYTES = "bytes"
    AGE = "age"
    APP = "app"


SESSION_SORT = SortTable(
    fields=SessionSort,
    columns={
        SessionSort.ID: SortColumn("ID", lambda s: s.id),
        SessionSort.BYTES: SortColumn("Bytes", lambda s: s.total_bytes),
        SessionSort.AGE: SortColumn("Age", lambda s: time_key(s.start_time)),
        SessionSort.APP: SortColumn("App", lambda s: s.application.casefold()),
    },
    default_ascending={
        SessionSort.ID: True,
        SessionSort.BYTES: False,
        SessionSort.AGE: False,
        SessionSort.APP: True,
    },
)

SESSIONS_SPEC: ListSpec[Session] = ListSpec(
    name="sessions",
    extractors=(
        lambda s: s.application,
        lambda s: s.source_ip,
        lambda s: s.dest_ip,
        lambda s: s.source_zone,
        lambda s: s.dest_zone,
        lambda s: s.rule,
        lambda s: s.user,
    ),
    sort_table=SESSION_SORT,
    initial_sort=SessionSort.ID,
    initial_ascending=False,  # newest sessions first
    overhead=8,
    expanded_overhead=8,
    placeholder="Filter by app, IP, zone, rule, user...",
    noun="sessions",
)


class SessionsView(ListView[Session]):
    spec = SESSIONS_SPEC
    title = "Sessions"

    def summary(self) -> str:
        text = super().summary()
        total = sum(s.total_bytes for s in self.list.filtered)
        return f"{text}, {format_bytes(total)}"

    def detail_lines(self, session: Session) -> list[tuple[str, str]]:
        lines = [
            ("ID", str(session.id)),
            ("State", session.state),
            ("Application", clean_value(session.application)),
            ("Protocol", session.protocol),
            ("Source", f"{session.source_ip}:{session.source_port} ({clean_value(session.source_zone)})"),
            ("Destination", f"{session.dest_ip}:{session.dest_port} ({clean_value(session.dest_zone)})"),
            ("Rule", clean_value(session.rule)),
            ("User", clean_value(session.user)),
            ("Bytes in/out", f"{format_bytes(session.bytes_in)} / {format_bytes(session.bytes_out)}"),
            ("Started", format_ago(session.start_time)),
        ]
        if session.nat_source_ip:
            lines.append(("NAT source", f"{session.nat_source_ip}:{session.nat_source_port}"))
        return lines
