"""Security policy view."""

from enum import Enum
from typing import Sequence

from pyre.formatting import clean_value, format_ago, format_number
from pyre.models import SecurityRule
from pyre.views.base import ListView
from pyre.views.list_controller import ListSpec
from pyre.views.sorting import SortColumn, SortTable, time_key


class PolicySort(Enum):
    POSITION = "position"
    NAME = "name"
    HITS = "hits"
    LAST_HIT = "last_hit"


def join_values(values: Sequence[str], empty: str = "any") -> str:
    return ", ".join(values) if values else empty


POLICY_SORT = SortTable(
    fields=PolicySort,
    columns={
        PolicySort.POSITION: SortColumn("#", lambda r: r.position),
        PolicySort.NAME: SortColumn("Name", lambda r: r.name.casefold()),
        PolicySort.HITS: SortColumn("Hits", lambda r: r.hit_count, tiebreak=lambda r: r.position),
        PolicySort.LAST_HIT: SortColumn("Last Hit", lambda r: time_key(r.last_hit), tiebreak=lambda r: r.position),
    },
    default_ascending={
        PolicySort.POSITION: True,
        PolicySort.NAME: True,
        PolicySort.HITS: False,
        PolicySort.LAST_HIT: False,
    },
)

POLICIES_SPEC: ListSpec[SecurityRule] = ListSpec(
    name="policies",
    extractors=(
        lambda r: r.name,
        lambda r: r.description,
        lambda r: " ".join(r.tags),
        lambda r: " ".join(r.source_zones),
        lambda r: " ".join(r.dest_zones),
        lambda r: " ".join(r.sources),
        lambda r: " ".join(r.destinations),
        lambda r: " ".join(r.applications),
        lambda r: " ".join(r.services),
    ),
    sort_table=POLICY_SORT,
    initial_sort=PolicySort.POSITION,
    overhead=8,
    expanded_overhead=16,
    placeholder="Filter by name, zone, address, app, tag...",
    noun="rules",
)


class SecurityPoliciesView(ListView[SecurityRule]):
    """Security rules in evaluation order, with hit counters."""

    spec = POLICIES_SPEC
    title = "Security Policies"

    def summary(self) -> str:
        rows = self.list.raw
        disabled = sum(1 for r in rows if r.disabled)
        unused = sum(1 for r in rows if not r.disabled and r.hit_count == 0)
        text = super().summary()
        if disabled:
            text = f"{text}, {disabled} disabled"
        if unused:
            text = f"{text}, {unused} unused"
        return text

    def detail_lines(self, rule: SecurityRule) -> list[tuple[str, str]]:
        return [
            ("Name", rule.name),
            ("Position", str(rule.position)),
            ("Action", rule.action),
            ("Type", rule.rule_type),
            ("State", "disabled" if rule.disabled else "enabled"),
            ("Description", clean_value(rule.description)),
            ("Tags", join_values(rule.tags, empty="")),
            ("From", f"{join_values(rule.source_zones)} / {join_values(rule.sources)}"),
            ("To", f"{join_values(rule.dest_zones)} / {join_values(rule.destinations)}"),
            ("Users", join_values(rule.source_users)),
            ("Applications", join_values(rule.applications)),
            ("Services", join_values(rule.services, empty="application-default")),
            ("Profile group", clean_value(rule.profile_group)),
            ("Hits", format_number(rule.hit_count)),
            ("Last hit", format_ago(rule.last_hit) if rule.last_hit else "never"),
        ]
