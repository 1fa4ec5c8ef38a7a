"""Turn list views into rich renderables.

Renderers read controller state and never mutate it. Styles come from an
explicit ``RenderContext`` so the same view renders identically in tests
and under any theme.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from pyre.formatting import clean_value, format_ago, format_bytes, format_duration, format_number, truncate
from pyre.views.base import ListView
from pyre.views.command_palette import CommandPalette
from pyre.views.nat_policies import format_dest_nat, format_source_nat
from pyre.views.policies import join_values
from pyre.views.routes import nexthop_label, protocol_code


@dataclass(frozen=True)
class RenderContext:
    """Styles used by every renderer."""

    row: str = ""
    selected: str = "reverse bold"
    header: str = "bold cyan"
    dim: str = "dim"
    error: str = "bold red"
    warning: str = "yellow"
    up: str = "green"
    down: str = "red"
    accent: str = "magenta"


DEFAULT_CONTEXT = RenderContext()


@dataclass(frozen=True)
class Column:
    header: str
    width: int
    value: Callable[[Any], str]
    justify: str = "left"


def _state(value: str) -> str:
    return "● up" if value.lower() == "up" else f"○ {value.lower()}"


def _last_hit(rule: Any) -> str:
    return format_ago(rule.last_hit).replace(" ago", "")


def _rule_name(rule: Any) -> str:
    return f"{rule.name} (disabled)" if rule.disabled else rule.name


COLUMNS: dict[str, list[Column]] = {
    "interfaces": [
        Column("Name", 18, lambda i: i.name),
        Column("State", 8, lambda i: _state(i.state)),
        Column("Zone", 10, lambda i: clean_value(i.zone) or "-"),
        Column("IP", 18, lambda i: clean_value(i.ip) or "-"),
        Column("Type", 10, lambda i: i.type),
        Column("VR", 10, lambda i: clean_value(i.virtual_router)),
        Column("Traffic", 10, lambda i: format_bytes(i.total_bytes), "right"),
    ],
    "routes": [
        Column("Destination", 20, lambda r: r.destination),
        Column("P", 2, protocol_code),
        Column("Next hop", 16, nexthop_label),
        Column("Interface", 14, lambda r: clean_value(r.interface) or "-"),
        Column("Metric", 6, lambda r: str(r.metric), "right"),
        Column("VR", 10, lambda r: clean_value(r.virtual_router)),
    ],
    "policies": [
        Column("#", 4, lambda r: str(r.position), "right"),
        Column("Name", 22, _rule_name),
        Column("Action", 8, lambda r: r.action),
        Column("From", 12, lambda r: join_values(r.source_zones)),
        Column("To", 12, lambda r: join_values(r.dest_zones)),
        Column("Applications", 18, lambda r: join_values(r.applications)),
        Column("Hits", 10, lambda r: format_number(r.hit_count), "right"),
        Column("Last hit", 10, _last_hit),
    ],
    "nat": [
        Column("#", 4, lambda r: str(r.position), "right"),
        Column("Name", 18, _rule_name),
        Column("From", 12, lambda r: join_values(r.source_zones)),
        Column("To", 10, lambda r: join_values(r.dest_zones)),
        Column("Source NAT", 24, format_source_nat),
        Column("Dest NAT", 18, format_dest_nat),
        Column("Hits", 10, lambda r: format_number(r.hit_count), "right"),
    ],
    "sessions": [
        Column("ID", 8, lambda s: str(s.id), "right"),
        Column("App", 14, lambda s: s.application),
        Column("Source", 21, lambda s: f"{s.source_ip}:{s.source_port}"),
        Column("Destination", 21, lambda s: f"{s.dest_ip}:{s.dest_port}"),
        Column("Zones", 16, lambda s: f"{s.source_zone}>{s.dest_zone}"),
        Column("Bytes", 10, lambda s: format_bytes(s.total_bytes), "right"),
        Column("Age", 10, lambda s: format_ago(s.start_time).replace(" ago", "")),
    ],
    "tunnels": [
        Column("Name", 16, lambda t: t.name),
        Column("Gateway", 16, lambda t: clean_value(t.gateway)),
        Column("State", 8, lambda t: _state(t.state)),
        Column("Encryption", 12, lambda t: clean_value(t.encryption)),
        Column("Traffic", 10, lambda t: format_bytes(t.traffic), "right"),
        Column("Uptime", 8, lambda t: clean_value(t.uptime)),
    ],
    "gp_users": [
        Column("Username", 14, lambda u: u.username),
        Column("Computer", 16, lambda u: clean_value(u.computer)),
        Column("Client IP", 16, lambda u: clean_value(u.client_ip)),
        Column("Virtual IP", 14, lambda u: clean_value(u.virtual_ip)),
        Column("Gateway", 10, lambda u: clean_value(u.gateway)),
        Column("Duration", 9, lambda u: format_duration(u.duration), "right"),
    ],
    "connections": [
        Column("", 1, lambda c: "*" if c.is_default else ""),
        Column("Host", 28, lambda c: c.host),
        Column("Type", 10, lambda c: c.type),
        Column("Last user", 14, lambda c: c.last_user or "-"),
        Column("Last connected", 16, lambda c: format_ago(c.last_connected)),
    ],
}


def status_line(view: ListView, ctx: RenderContext = DEFAULT_CONTEXT) -> Text:
    """Title, counts and the active filter or sort."""
    controller = view.list
    text = Text()
    text.append(view.title, style=ctx.header)
    text.append(f"  {view.summary()}", style=ctx.dim)
    if controller.state.loading:
        text.append("  loading...", style=ctx.warning)
    return text


def filter_line(view: ListView, ctx: RenderContext = DEFAULT_CONTEXT) -> Optional[Text]:
    """The filter input while editing, or the committed filter with match counts."""
    controller = view.list
    if controller.filter_mode:
        text = Text("Filter: ", style=ctx.accent)
        text.append(controller.filter_text or "")
        text.append("█", style=ctx.accent)
        if not controller.filter_text:
            text.append(f" {view.spec.placeholder}", style=ctx.dim)
        return text
    if controller.is_filtered:
        shown, total = controller.counts
        text = Text(f"Filter: {controller.state.committed_filter} ({shown}/{total})", style=ctx.accent)
        text.append("  [esc to clear]", style=ctx.dim)
        return text
    return None


def render_table(view: ListView, ctx: RenderContext = DEFAULT_CONTEXT) -> RenderableType:
    """Header row plus the rows inside the scroll window."""
    controller = view.list
    columns = COLUMNS[view.name]
    table = Table(box=None, expand=True, show_edge=False, pad_edge=False, header_style=ctx.header)
    for column in columns:
        table.add_column(column.header, width=column.width, justify=column.justify, no_wrap=True)
    for index, entity in controller.window():
        cells = [truncate(column.value(entity), column.width) for column in columns]
        style = ctx.selected if index == controller.cursor else ctx.row
        table.add_row(*cells, style=style)
    return table


def detail_panel(view: ListView, ctx: RenderContext = DEFAULT_CONTEXT) -> Optional[Text]:
    entity = view.selected
    if not view.list.state.expanded or entity is None:
        return None
    text = Text()
    for label, value in view.detail_lines(entity):
        text.append(f"{label:>16}: ", style=ctx.dim)
        text.append(f"{value or '-'}\n")
    return text


def render_view(view: ListView, ctx: RenderContext = DEFAULT_CONTEXT) -> RenderableType:
    """Full rendering of one list view: status, filter, rows or empty/error state, help."""
    controller = view.list
    parts: list[RenderableType] = [status_line(view, ctx)]

    filter_text = filter_line(view, ctx)
    if filter_text is not None:
        parts.append(filter_text)

    error = controller.state.last_error
    if error is not None:
        parts.append(Text(f"Error: {error}", style=ctx.error))

    if not controller.has_data and controller.state.loading:
        parts.append(Text(f"Loading {view.spec.noun}...", style=ctx.dim))
    elif not controller.filtered:
        if controller.is_filtered:
            parts.append(Text(f"No {view.spec.noun} match the filter", style=ctx.dim))
        elif error is None:
            parts.append(Text(f"No {view.spec.noun} found", style=ctx.dim))
    else:
        parts.append(render_table(view, ctx))
        detail = detail_panel(view, ctx)
        if detail is not None:
            parts.append(detail)

    parts.append(Text(view.help_keys(), style=ctx.dim))
    return Group(*parts)


def render_palette(palette: CommandPalette, ctx: RenderContext = DEFAULT_CONTEXT) -> RenderableType:
    """The palette input, grouped entries and scroll position."""
    prompt = Text("> ", style=ctx.accent)
    prompt.append(palette.query)
    prompt.append("█", style=ctx.accent)
    if palette.prefilter:
        prompt.append(f"  in {palette.prefilter}", style=ctx.dim)

    parts: list[RenderableType] = [prompt, Text("")]
    rows = palette.render_rows()
    if not rows:
        parts.append(Text("No matching commands", style=ctx.dim))
    for row in rows:
        if row.kind == "header":
            parts.append(Text(row.text, style=ctx.header))
            continue
        line = Text(f"  {row.text}", style=ctx.selected if row.selected else ctx.row)
        command = row.command
        if command is not None and command.description:
            line.append(f"  {command.description}", style=ctx.dim)
        if command is not None and command.shortcut:
            line.append(f"  [{command.shortcut}]", style=ctx.accent)
        parts.append(line)

    footer = Text("↑↓ navigate  enter run  esc close", style=ctx.dim)
    position = palette.position_label()
    if position:
        footer.append(f"  {position}", style=ctx.dim)
    parts.extend([Text(""), footer])
    return Group(*parts)
