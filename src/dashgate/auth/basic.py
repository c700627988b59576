"""HTTP Basic credential parsing.

Learn: FastAPI's HTTPBasic dependency answers a malformed header with its
own 401, which would jump ahead of the gate's transport checks. The gate
needs "malformed" to mean "no credentials", so the header is parsed here.
"""

import base64
import binascii
import re
from typing import Optional

from dashgate.auth.authenticator import PresentedCredential

# "Basic <token68>", scheme is case-insensitive
_CREDENTIALS_RE = re.compile(r"^ *basic +([A-Za-z0-9._~+/-]+=*) *$", re.IGNORECASE)
_USER_PASS_RE = re.compile(r"^([^:]*):(.*)$", re.DOTALL)

CHALLENGE = "Basic realm=Authorization Required"


def parse_basic_auth(header: Optional[str]) -> Optional[PresentedCredential]:
    """Return the (username, password) pair from an Authorization header.

    Returns None when the header is missing, uses another scheme, or does
    not decode to "user:pass". The password may be an empty string.
    """
    if not header:
        return None

    match = _CREDENTIALS_RE.match(header)
    if not match:
        return None

    # Some clients drop the trailing "=" padding
    token = match.group(1).rstrip("=")
    token += "=" * (-len(token) % 4)
    try:
        decoded = base64.b64decode(token, validate=False).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    user_pass = _USER_PASS_RE.match(decoded)
    if not user_pass:
        return None

    return PresentedCredential(username=user_pass.group(1), password=user_pass.group(2))


def encode_basic_auth(username: str, password: str) -> str:
    """Build an Authorization header value."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"
