"""NAT policy view."""

from enum import Enum

from pyre.formatting import clean_value, format_ago, format_number
from pyre.models import NATRule, SourceTranslation
from pyre.views.base import ListView
from pyre.views.list_controller import ListSpec
from pyre.views.policies import PolicySort, join_values
from pyre.views.sorting import SortColumn, SortTable, time_key


TRANSLATION_PREFIX = {
    SourceTranslation.DYNAMIC_IP_AND_PORT.value: "DIPP",
    SourceTranslation.DYNAMIC_IP.value: "DIP",
    SourceTranslation.STATIC_IP.value: "Static",
}


def format_source_nat(rule: NATRule) -> str:
    """Short source translation label such as ``DIPP: ethernet1/1``."""
    prefix = TRANSLATION_PREFIX.get(rule.source_translation)
    if prefix is None:
        return "None"
    if not rule.translated_source:
        return prefix
    return f"{prefix}: {rule.translated_source}"


def format_dest_nat(rule: NATRule) -> str:
    if not rule.translated_dest:
        return "None"
    if rule.translated_dest_port:
        return f"{rule.translated_dest}:{rule.translated_dest_port}"
    return rule.translated_dest


NAT_SORT = SortTable(
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

NAT_SPEC: ListSpec[NATRule] = ListSpec(
    name="nat",
    extractors=(
        lambda r: r.name,
        lambda r: r.description,
        lambda r: " ".join(r.tags),
        lambda r: " ".join(r.source_zones),
        lambda r: " ".join(r.dest_zones),
        lambda r: " ".join(r.sources),
        lambda r: " ".join(r.destinations),
        lambda r: r.translated_source,
        lambda r: r.translated_dest,
    ),
    sort_table=NAT_SORT,
    initial_sort=PolicySort.POSITION,
    overhead=8,
    expanded_overhead=14,
    placeholder="Filter by name, zone, address, translation...",
    noun="rules",
)


class NATPoliciesView(ListView[NATRule]):
    spec = NAT_SPEC
    title = "NAT Policies"

    def summary(self) -> str:
        rows = self.list.raw
        disabled = sum(1 for r in rows if r.disabled)
        text = super().summary()
        if disabled:
            text = f"{text}, {disabled} disabled"
        return text

    def detail_lines(self, rule: NATRule) -> list[tuple[str, str]]:
        return [
            ("Name", rule.name),
            ("Position", str(rule.position)),
            ("State", "disabled" if rule.disabled else "enabled"),
            ("Description", clean_value(rule.description)),
            ("Tags", join_values(rule.tags, empty="")),
            ("From", f"{join_values(rule.source_zones)} / {join_values(rule.sources)}"),
            ("To", f"{join_values(rule.dest_zones)} / {join_values(rule.destinations)}"),
            ("Service", rule.service),
            ("Egress interface", clean_value(rule.dest_interface)),
            ("Source NAT", format_source_nat(rule)),
            ("Destination NAT", format_dest_nat(rule)),
            ("Hits", format_number(rule.hit_count)),
            ("Last hit", format_ago(rule.last_hit) if rule.last_hit else "never"),
        ]
