"""Pydantic models for expression requests and per-line results."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class OperationRequest(BaseModel):
    """Represents a single expression line sent to the calculator."""

    expression: str = Field(..., description="Expression as a string")

    @field_validator("expression")
    def expression_must_not_be_blank(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank lines."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v.strip()


class OperationResult(BaseModel):
    """Represents the outcome of evaluating one expression line."""

    line: int = Field(..., ge=1, description="Line number in the session")
    expression: str = Field(..., description="Original expression")
    result: Optional[int] = Field(default=None, description="Evaluated integer value")
    error: Optional[str] = Field(default=None, description="Error message if evaluation failed")

    @model_validator(mode="after")
    def exactly_one_outcome(self) -> "OperationResult":
        """Ensure a result carries either a value or an error, never both."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of result and error must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str:
        if self.ok:
            return f"{self.expression} = {self.result}"
        return f"{self.expression} -> ERROR: {self.error}"
