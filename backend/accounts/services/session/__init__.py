from .service import SessionAuthenticator, bearer_token

__all__ = ["SessionAuthenticator", "bearer_token"]
