from .pyjwt_token_provider import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE, PyJWTTokenProvider

__all__ = ["ACCESS_TOKEN_TYPE", "REFRESH_TOKEN_TYPE", "PyJWTTokenProvider"]
