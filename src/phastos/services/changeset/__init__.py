"""Changeset workflow service modules."""

from .fresh_changeset import FreshChangesetRequest, FreshChangesetService
from .switch_changeset import SwitchChangesetRequest, SwitchChangesetService

__all__ = [
    "FreshChangesetRequest",
    "FreshChangesetService",
    "SwitchChangesetRequest",
    "SwitchChangesetService",
]
