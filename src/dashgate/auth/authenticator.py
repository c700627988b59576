"""Match presented credentials against the configured users.

Learn: authenticate() is a pure function over an immutable CredentialStore.
It walks users in configured order and returns the first one whose
username matches exactly and whose password verifies. Unknown user and
wrong password produce the same result, so callers cannot tell them apart.
"""

from dataclasses import dataclass
from typing import Optional

from dashgate.auth.password import verify_password, verify_plain


@dataclass(frozen=True)
class UserCredential:
    username: str
    password: str  # plain text, or a bcrypt hash when the store is encrypted
    scoped_apps: Optional[tuple[str, ...]] = None  # None = every app

    def __repr__(self) -> str:
        return f"UserCredential(username={self.username!r}, scoped_apps={self.scoped_apps!r})"


@dataclass(frozen=True)
class CredentialStore:
    """Configured users plus one store-wide hashing flag.

    Mixed stores (some plain, some hashed) are not supported: the flag
    applies to every entry. An empty store means no-auth mode.
    """

    users: tuple[UserCredential, ...] = ()
    uses_encrypted_passwords: bool = False

    def __bool__(self) -> bool:
        return bool(self.users)


@dataclass(frozen=True)
class PresentedCredential:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"PresentedCredential(username={self.username!r})"


@dataclass(frozen=True)
class AuthenticationResult:
    is_authenticated: bool
    authorized_apps: Optional[tuple[str, ...]] = None  # None = unrestricted


NOT_AUTHENTICATED = AuthenticationResult(is_authenticated=False, authorized_apps=None)


def authenticate(
    users: tuple[UserCredential, ...],
    uses_encrypted_passwords: bool,
    presented: PresentedCredential,
) -> AuthenticationResult:
    """Return the first configured user matching the presented pair.

    Duplicate usernames are allowed; the earliest entry whose password
    verifies wins. A user with no scoped apps yields authorized_apps=None,
    never an empty tuple.

    In bcrypt mode an unknown username still pays for one checkpw against
    a configured hash (result discarded), so response time does not reveal
    which usernames exist.
    """
    check = verify_password if uses_encrypted_passwords else verify_plain
    username_seen = False
    for user in users:
        if user.username != presented.username:
            continue
        username_seen = True
        if check(presented.password, user.password):
            return AuthenticationResult(
                is_authenticated=True,
                authorized_apps=user.scoped_apps,
            )
    if uses_encrypted_passwords and users and not username_seen:
        verify_password(presented.password, users[0].password)
    return NOT_AUTHENTICATED


class Authenticator:
    """Binds authenticate() to one CredentialStore."""

    def __init__(self, store: CredentialStore):
        self.store = store

    @property
    def has_users(self) -> bool:
        return bool(self.store)

    def authenticate(self, presented: PresentedCredential) -> AuthenticationResult:
        return authenticate(
            self.store.users, self.store.uses_encrypted_passwords, presented
        )
