"""Enums for Pydantic schemas."""

from enum import Enum


class ReviewState(str, Enum):
    """States a pull request review can be submitted in."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"


class CreditKind(str, Enum):
    """How an actor earned credit on a merged pull request."""

    APPROVED = "approved"
    LGTM = "lgtm"
