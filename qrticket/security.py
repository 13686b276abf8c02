from jose import jwt
from jose.exceptions import JWTError
from datetime import datetime, timezone

def check_bearer_token(token: str, audience: str) -> dict:
    """Sanity-check an access token before sending it to the ticketing API.

    The signature is verified by the ticketing API itself; here we only make
    sure the authorization server handed out a token for our audience that
    has not already expired.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        raise ValueError("MALFORMED_TOKEN")

    aud = claims.get("aud")
    audiences = aud if isinstance(aud, list) else [aud]
    if audience not in audiences:
        raise ValueError("WRONG_AUDIENCE")

    now = datetime.now(timezone.utc).timestamp()
    exp = claims.get("exp")
    if exp is None or now > float(exp):
        raise ValueError("EXPIRED")

    return claims
