"""Delete request model for a single blob deletion target."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class DeleteRequest(BaseModel):
    """One blob to delete, with the source line it was read from."""

    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    account: str
    container: str
    blob_name: str
    line_number: int
    raw_line: str = ""

    @field_validator("account", "container", "blob_name")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        """Account, container and blob name must not be blank."""
        if not value.strip():
            msg = "account, container and blob_name must not be blank"
            raise ValueError(msg)
        return value

    @field_validator("line_number")
    @classmethod
    def validate_line_number(cls, value: int) -> int:
        """Line numbers are 1-based."""
        if value < 1:
            msg = "line_number must be greater than 0"
            raise ValueError(msg)
        return value

    @property
    def line_context(self) -> str:
        """Source line reference used in diagnostics."""
        return f"line {self.line_number}: {self.raw_line}"

    def __str__(self) -> str:
        return f"{self.account}/{self.container}/{self.blob_name} (line {self.line_number})"
