"""Artifacts used to represent ECS task definitions."""
from typing import Optional

from attrs import define


@define(frozen=True, kw_only=True)
class TaskDefinitionFile:
    """A task definition document written to the work directory.

    Arguments:
        family: the task definition's family.
        path: the path of the JSON document.
        revision: the revision number the document was downloaded from. None
            for a rendered document that has not been registered yet.
    """

    family: str
    path: str
    revision: Optional[int] = None
