"""
Ingestion quality models for the sheet adapters.
"""

from pydantic import BaseModel, Field, field_validator


class SkippedRow(BaseModel):
    """
    A sheet row the adapter could not turn into a model.

    Attributes:
        row_index: Zero-based position of the row in the input
        field: Column that made the row unusable, when known
        reason: Human-readable description of the problem
    """

    row_index: int = Field(description="Zero-based row position", ge=0)
    field: str = Field(default="", description="Offending column, if known")
    reason: str = Field(description="Why the row was skipped")


class IngestReport(BaseModel):
    """
    Outcome of one adapter run.

    Attributes:
        source: Sheet the rows came from (performance, accounts, ...)
        total_rows: Rows read
        valid_rows: Rows converted to models
        skipped_rows: Rows dropped
        skipped: Details for each dropped row
    """

    source: str = Field(description="Sheet the rows came from")
    total_rows: int = Field(default=0, ge=0)
    valid_rows: int = Field(default=0, ge=0)
    skipped_rows: int = Field(default=0, ge=0)
    skipped: list[SkippedRow] = Field(default_factory=list)

    @field_validator("skipped_rows")
    @classmethod
    def validate_skipped_rows(cls, v: int) -> int:
        if v < 0:
            raise ValueError("skipped_rows must be non-negative")
        return v

    @property
    def acceptance_rate(self) -> float:
        """Share of rows accepted (1.0 for an empty sheet)."""
        if self.total_rows == 0:
            return 1.0
        return self.valid_rows / self.total_rows
