"""
Domain models for the pool insert benchmark.

Defines the synthetic row written by every insertion strategy, aligned with the
`users` table in `db/init.sql`. Rows are derived deterministically from a
strategy tag and a row index so each strategy's output can be told apart in a
shared table.
"""
from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, Field


class SyntheticUser(BaseModel):
    """
    A generated `(name, email)` pair.

    Example: tag "Pool", index 7 -> name "UserPool7", email "pool7@example.com".
    """

    name: str = Field(..., description="Display name, `User<Tag><index>`.")
    email: str = Field(..., description="Address, `<tag><index>@example.com`.")

    model_config = {
        "frozen": True,
    }

    @classmethod
    def for_index(cls, tag: str, index: int) -> "SyntheticUser":
        return cls(name=f"User{tag}{index}", email=f"{tag.lower()}{index}@example.com")

    def as_params(self) -> Tuple[str, str]:
        """Positional parameters for `INSERT ... (name, email) VALUES (%s, %s)`."""
        return (self.name, self.email)


__all__ = ["SyntheticUser"]
