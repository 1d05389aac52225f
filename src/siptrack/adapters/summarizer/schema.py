"""Shape of the structured summary returned by the language model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from siptrack.domain.model import (
    INSUFFICIENT_INFO_MESSAGE,
    INSUFFICIENT_SUMMARY,
    StructuredSummary,
    SummaryResult,
)


class SummaryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    what_it_is: str = Field(alias="whatItIs")
    what_it_changes: str = Field(alias="whatItChanges")
    why_it_matters: str = Field(alias="whyItMatters")

    @field_validator("what_it_is", "what_it_changes", "why_it_matters", mode="before")
    @classmethod
    def _blank_to_insufficient(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and not value.strip()):
            return INSUFFICIENT_INFO_MESSAGE
        return value.strip() if isinstance(value, str) else value

    def to_result(self) -> SummaryResult:
        structured = StructuredSummary(
            what_it_is=self.what_it_is,
            what_it_changes=self.what_it_changes,
            why_it_matters=self.why_it_matters,
        )
        if structured.is_insufficient:
            return INSUFFICIENT_SUMMARY
        headline = next(
            value
            for value in (self.what_it_is, self.what_it_changes, self.why_it_matters)
            if value != INSUFFICIENT_INFO_MESSAGE
        )
        return SummaryResult(headline=headline, structured=structured)
