"""Shared Pydantic base models."""

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """Base model with strict, immutable defaults."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class LenientBaseModel(BaseModel):
    """Base model for records supplied by external collaborators.

    Unknown keys are ignored so that a collaborator adding fields to its
    payload never breaks ingestion.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")
