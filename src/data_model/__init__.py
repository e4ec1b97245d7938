"""Shared data model primitives."""

from src.data_model.base import LenientBaseModel, StrictBaseModel
from src.data_model.timestamps import parse_timestamp


__all__ = ["LenientBaseModel", "StrictBaseModel", "parse_timestamp"]
