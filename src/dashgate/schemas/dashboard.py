"""Pydantic schemas for the dashboard config document.

Learn: the JSON document uses the dashboard client's camelCase keys
(appId, useEncryptedPasswords, allowInsecureHTTP). Fields are declared in
snake_case with aliases so both spellings validate, and apps keep any
extra keys (masterKey, serverURL, appName, ...) untouched because the
client needs them verbatim.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from dashgate.auth.authenticator import CredentialStore, UserCredential


class AppDescriptor(BaseModel):
    """One application entry. Opaque apart from its appId."""

    model_config = {"extra": "allow", "frozen": True, "populate_by_name": True}

    app_id: str = Field(..., alias="appId", min_length=1)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class UserEntry(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}

    user: str = Field(..., min_length=1)
    password: str = Field(..., alias="pass")
    apps: Optional[tuple[str, ...]] = None

    @field_validator("apps", mode="before")
    @classmethod
    def _app_ids(cls, value):
        """Accept [{"appId": "x"}, ...] as well as ["x", ...]."""
        if value is None:
            return None
        if not isinstance(value, (list, tuple)):
            raise ValueError("apps must be a list")
        ids = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("appId")
            if not isinstance(item, str) or not item:
                raise ValueError("each app must be an appId string or an object with appId")
            ids.append(item)
        return tuple(ids)

    def to_credential(self) -> UserCredential:
        return UserCredential(
            username=self.user,
            password=self.password,
            scoped_apps=self.apps,
        )


class DashboardConfig(BaseModel):
    """The whole dashboard document, validated once at startup."""

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    apps: tuple[AppDescriptor, ...] = ()
    users: tuple[UserEntry, ...] = ()
    use_encrypted_passwords: bool = Field(False, alias="useEncryptedPasswords")
    allow_insecure_http: bool = Field(False, alias="allowInsecureHTTP")
    trust_proxy: bool = Field(False, alias="trustProxy")

    @field_validator("users", mode="before")
    @classmethod
    def _null_users(cls, value):
        # "users": null means no-auth mode, same as leaving it out
        return () if value is None else value

    @model_validator(mode="after")
    def _scoped_apps_exist(self):
        known = {app.app_id for app in self.apps}
        for entry in self.users:
            for app_id in entry.apps or ():
                if app_id not in known:
                    raise ValueError(
                        f"user '{entry.user}' is scoped to unknown app '{app_id}'"
                    )
        return self

    @property
    def has_users(self) -> bool:
        return bool(self.users)

    def credential_store(self) -> CredentialStore:
        return CredentialStore(
            users=tuple(entry.to_credential() for entry in self.users),
            uses_encrypted_passwords=self.use_encrypted_passwords,
        )

    def duplicate_usernames(self) -> list[str]:
        """Usernames configured more than once; the first entry wins."""
        seen: set[str] = set()
        dupes: list[str] = []
        for entry in self.users:
            if entry.user in seen and entry.user not in dupes:
                dupes.append(entry.user)
            seen.add(entry.user)
        return dupes

    def apps_payload(self, app_ids: Optional[tuple[str, ...]] = None) -> list[dict[str, Any]]:
        """Serialize apps for the client, optionally restricted to app_ids.

        Configured order is kept; app_ids=None means every app.
        """
        if app_ids is None:
            return [app.to_payload() for app in self.apps]
        allowed = set(app_ids)
        return [app.to_payload() for app in self.apps if app.app_id in allowed]
