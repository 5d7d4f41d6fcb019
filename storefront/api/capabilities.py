"""라우트 권한 테이블 — 라우트 이름별로 허용되는 동작을 선언.

Route capability table. Keyed by route name (the ``name=`` given on each
route definition), consulted by the password-change gate in ``deps.py``.
A route that is not listed gets the defaults.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteCapabilities:
    """라우트별 권한 — Per-route capabilities.

    Attributes:
        allow_password_change: 비밀번호 변경 대기 중에도 호출 가능
                               (Callable while a password change is pending)
    """

    allow_password_change: bool = False


_DEFAULT: RouteCapabilities = RouteCapabilities()

# 비밀번호 변경 대기 중에도 허용되는 라우트
# Routes usable while a password change is pending
ROUTE_CAPABILITIES: dict[str, RouteCapabilities] = {
    "login": RouteCapabilities(allow_password_change=True),
    "register": RouteCapabilities(allow_password_change=True),
    "refresh": RouteCapabilities(allow_password_change=True),
    "logout": RouteCapabilities(allow_password_change=True),
    "change_password": RouteCapabilities(allow_password_change=True),
}


def capabilities_for(route_name: str | None) -> RouteCapabilities:
    """라우트 이름의 권한 조회 — Capabilities of a route, defaults if unlisted."""
    if route_name is None:
        return _DEFAULT
    return ROUTE_CAPABILITIES.get(route_name, _DEFAULT)
