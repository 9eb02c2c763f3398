"""Artifacts produced when fetching the project sources."""
from typing import Optional

from attrs import define


@define(frozen=True, kw_only=True)
class SourceTree:
    """The project sources checked out at the revision being deployed.

    Arguments:
        path: directory containing the working tree.
        revision: the commit SHA checked out.
        branch: the branch checked out. None for a detached HEAD.
    """

    path: str
    revision: str
    branch: Optional[str] = None
