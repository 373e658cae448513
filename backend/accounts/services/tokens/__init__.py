"""Session-token lifecycle (issue / verify / rotate / revoke)."""

from .dto import AccessClaims, TokenConfig, TokenPair
from .service import ROTATION_FAILED, TokenService
from .state import RefreshTokenState, Transition

__all__ = [
    "AccessClaims",
    "ROTATION_FAILED",
    "RefreshTokenState",
    "TokenConfig",
    "TokenPair",
    "TokenService",
    "Transition",
]
