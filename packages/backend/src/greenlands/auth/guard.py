"""Client-side route guard decisions.

The SPA mirrors the server's authorization purely for UX: it must not
flash a view the user cannot use, and it must send anonymous users to the
login page. This module is that decision as a pure function over
VIEW_POLICY, so the client and the server test-suite share one behaviour.
It is never a security boundary; the API enforces API_POLICY on its own.
"""

import enum
from typing import Iterable, Optional

from greenlands.auth.policy import VIEW_POLICY, Decision, authorize


class GuardOutcome(str, enum.Enum):
    WAIT = "wait"  # identity still resolving — render nothing
    RENDER = "render"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_HOME = "redirect_home"


def guard_view(
    role: Optional[str],
    required_roles: Optional[Iterable],
    loading: bool = False,
) -> GuardOutcome:
    """Decide what a protected view does for the current identity.

    role is None when nobody is signed in. required_roles=None means any
    signed-in user may see the view.
    """
    if loading:
        return GuardOutcome.WAIT
    if role is None:
        return GuardOutcome.REDIRECT_LOGIN
    if required_roles is not None and authorize(role, required_roles) is Decision.DENY:
        return GuardOutcome.REDIRECT_HOME
    return GuardOutcome.RENDER


def guard_path(role: Optional[str], path: str, loading: bool = False) -> GuardOutcome:
    """guard_view() for a path in VIEW_POLICY; unknown paths need only a login."""
    return guard_view(role, VIEW_POLICY.get(path), loading=loading)


def allowed_views(role: Optional[str]) -> list[str]:
    """Every VIEW_POLICY path the role renders, sorted."""
    return sorted(
        path for path in VIEW_POLICY
        if guard_path(role, path) is GuardOutcome.RENDER
    )
