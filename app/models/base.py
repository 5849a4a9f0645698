"""Shared helpers for the record models."""

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Opaque identifier used for every entity."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
