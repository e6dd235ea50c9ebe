"""Evaluation feedback model."""

from pydantic import BaseModel, ConfigDict, Field


class Feedback(BaseModel):
    """Scored feedback for one answer.

    Built from the JSON object the evaluator model returns. Unknown keys are
    ignored; scores outside 0-5 or an empty narrative fail validation.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, str_strip_whitespace=True)

    feedback: str = Field(min_length=1)
    correctness: int = Field(ge=0, le=5)
    completeness: int = Field(ge=0, le=5)
