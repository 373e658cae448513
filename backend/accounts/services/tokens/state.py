"""Per-user refresh-token state machine.

A user either has no accepted refresh token (``NONE``) or exactly one
(``ACTIVE``). Every write to the stored refresh token is one of three
transitions::

    NONE   --issue-->  ACTIVE
    ACTIVE --issue-->  ACTIVE   (re-login replaces the token)
    ACTIVE --rotate--> ACTIVE   (presented token replaced)
    *      --revoke--> NONE

Rotating while ``NONE`` is illegal.
"""

from __future__ import annotations

from enum import StrEnum

from accounts.services._shared.errors import InvalidTokenError


class RefreshTokenState(StrEnum):
    NONE = "none"
    ACTIVE = "active"


class Transition(StrEnum):
    ISSUE = "issue"
    ROTATE = "rotate"
    REVOKE = "revoke"


_TRANSITIONS: dict[tuple[RefreshTokenState, Transition], RefreshTokenState] = {
    (RefreshTokenState.NONE, Transition.ISSUE): RefreshTokenState.ACTIVE,
    (RefreshTokenState.ACTIVE, Transition.ISSUE): RefreshTokenState.ACTIVE,
    (RefreshTokenState.ACTIVE, Transition.ROTATE): RefreshTokenState.ACTIVE,
    (RefreshTokenState.NONE, Transition.REVOKE): RefreshTokenState.NONE,
    (RefreshTokenState.ACTIVE, Transition.REVOKE): RefreshTokenState.NONE,
}


def state_of(stored_token: str | None) -> RefreshTokenState:
    """Classify the stored column value; empty strings count as ``NONE``."""
    return RefreshTokenState.ACTIVE if stored_token else RefreshTokenState.NONE


def next_state(current: RefreshTokenState, transition: Transition) -> RefreshTokenState:
    """
    Return the state reached by applying ``transition`` to ``current``.

    :raises InvalidTokenError: If the transition is not allowed from ``current``.
    """
    try:
        return _TRANSITIONS[(current, transition)]
    except KeyError:
        raise InvalidTokenError(f"Cannot {transition} a refresh token in state {current}") from None
