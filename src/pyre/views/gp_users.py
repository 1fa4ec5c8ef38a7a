"""GlobalProtect users view."""

from enum import Enum

from pyre.formatting import clean_value, format_duration
from pyre.models import GlobalProtectUser
from pyre.views.base import ListView
from pyre.views.list_controller import ListSpec
from pyre.views.sorting import SortColumn, SortTable, time_key


class GPUserSort(Enum):
    USERNAME = "username"
    GATEWAY = "gateway"
    LOGIN = "login"
    DURATION = "duration"


GP_USER_SORT = SortTable(
    fields=GPUserSort,
    columns={
        GPUserSort.USERNAME: SortColumn("Username", lambda u: u.username.casefold()),
        GPUserSort.GATEWAY: SortColumn("Gateway", lambda u: u.gateway.casefold()),
        GPUserSort.LOGIN: SortColumn("Login Time", lambda u: time_key(u.login_time)),
        GPUserSort.DURATION: SortColumn("Duration", lambda u: u.duration),
    },
    default_ascending={
        GPUserSort.USERNAME: True,
        GPUserSort.GATEWAY: True,
        GPUserSort.LOGIN: False,
        GPUserSort.DURATION: False,
    },
)

GP_USERS_SPEC: ListSpec[GlobalProtectUser] = ListSpec(
    name="gp_users",
    extractors=(
        lambda u: u.username,
        lambda u: u.domain,
        lambda u: u.computer,
        lambda u: u.gateway,
        lambda u: u.client_ip,
        lambda u: u.virtual_ip,
        lambda u: u.source_region,
    ),
    sort_table=GP_USER_SORT,
    initial_sort=GPUserSort.USERNAME,
    overhead=8,
    expanded_overhead=14,
    placeholder="Filter by user, computer, gateway, IP...",
    noun="users",
)


class GPUsersView(ListView[GlobalProtectUser]):
    spec = GP_USERS_SPEC
    title = "GlobalProtect Users"

    def summary(self) -> str:
        rows = self.list.raw
        gateways = {u.gateway for u in rows if u.gateway}
        return f"{super().summary()} on {len(gateways)} gateways"

    def detail_lines(self, user: GlobalProtectUser) -> list[tuple[str, str]]:
        login = user.login_time.strftime("%Y-%m-%d %H:%M") if user.login_time else ""
        return [
            ("Username", user.username),
            ("Domain", clean_value(user.domain)),
            ("Computer", clean_value(user.computer)),
            ("Client IP", clean_value(user.client_ip)),
            ("Virtual IP", clean_value(user.virtual_ip)),
            ("Gateway", clean_value(user.gateway)),
            ("Region", clean_value(user.source_region)),
            ("Client version", clean_value(user.client_version)),
            ("Login", login),
            ("Duration", format_duration(user.duration)),
        ]
