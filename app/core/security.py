from jose import jwt

from app.core.config import settings

# Tokens are issued by the identity service; this side only needs to agree on the key and algorithm.
ALGO = "HS256"


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])
