"""Stored user credential model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class UserCredential(BaseModel):
    """Identity plus encoded secret, as persisted.

    ``encoded_secret`` is whatever the configured secret codec produced;
    it is never the plaintext.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    identity: str = Field(validation_alias=AliasChoices("identity", "email"))
    encoded_secret: str = Field(
        validation_alias=AliasChoices("encodedSecret", "encoded_secret", "password"),
        serialization_alias="encodedSecret",
    )

    @field_validator("identity")
    @classmethod
    def _identity_non_empty(cls, value: str) -> str:
        identity = value.strip()
        if not identity:
            raise ValueError("identity must be non-empty")
        return identity

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def __repr__(self) -> str:
        return f"UserCredential(identity={self.identity!r}, encoded_secret=<redacted>)"
