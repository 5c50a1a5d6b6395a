"""Loading and normalization of hand-written resource models."""

from apipls.resource_model.loader import load_resource_models
from apipls.resource_model.normalize import ACTIONS, normalize_resource_model

__all__ = [
    "ACTIONS",
    "load_resource_models",
    "normalize_resource_model",
]
