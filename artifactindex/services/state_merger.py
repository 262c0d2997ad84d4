"""
State merge between a freshly built project and stored project state.

Stored state contributes operator flags only; every data field comes from
the fresh project. No field is ever taken from both sides.
"""

from dataclasses import replace
from typing import Optional

from ..domain import Project, StoredFlags


def merge_state(fresh: Project, prior_flags: Optional[StoredFlags]) -> Project:
    """
    Apply stored flags onto a freshly computed project.

    Args:
        fresh: Project computed in this run
        prior_flags: Flags of the stored project, None if it was never stored

    Returns:
        fresh with flags replaced by prior_flags (or the defaults)
    """
    return replace(fresh, flags=prior_flags if prior_flags is not None else StoredFlags())
