from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EntitlementSnapshot(BaseModel):
    """Resolved premium status for a viewer.

    `email` is None for the anonymous viewer. The serialized (alias) form is
    also the persisted session record: `{email, name, isPremium, premiumUntil}`.
    """

    email: str | None = None
    name: str | None = None
    premium: bool = Field(
        default=False,
        alias="isPremium",
        validation_alias=AliasChoices("isPremium", "premium"),
    )
    premium_until: datetime | None = Field(
        default=None,
        alias="premiumUntil",
        validation_alias=AliasChoices("premiumUntil", "premium_until"),
    )

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True, frozen=True)

    @classmethod
    def anonymous(cls) -> "EntitlementSnapshot":
        return cls()

    @classmethod
    def for_login(cls, email: str) -> "EntitlementSnapshot":
        """Fresh non-premium snapshot for a quick login, named after the email local part."""
        email = email.strip()
        return cls(email=email, name=email.split("@")[0], premium=False)

    @property
    def is_anonymous(self) -> bool:
        return not self.email
