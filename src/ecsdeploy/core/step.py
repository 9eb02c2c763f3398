"""Base class for all the step implementations."""
import abc
from typing import TYPE_CHECKING, Generic, TypeVar

from attrs import define

if TYPE_CHECKING:
    from ecsdeploy.core.context import Context


ResultType = TypeVar("ResultType")
SnapshotType = TypeVar("SnapshotType")


@define(frozen=True, kw_only=True)
class Step(Generic[ResultType, SnapshotType], abc.ABC):
    """Base class to be used for all steps.

    Any other field declared by a step is a parameter set in the pipeline
    configuration. A parameter can reference the result of a previous step.

    Arguments:
        name: identify a step within the pipeline.
    """

    name: str

    @classmethod
    @abc.abstractmethod
    def spec_name(cls) -> str:
        """Returns the name of this type of step, used as `type` in the
        pipeline configuration."""
        raise NotImplementedError

    def snapshot(self, ctx: "Context") -> SnapshotType:
        """Takes a snapshot of the state before running the step. This data is
        useful when rolling back a step to its previous state.

        Arguments:
            ctx: the context to use when executing the step.

        Returns:
            Data captured before running the step.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def run(self, ctx: "Context", snapshot: SnapshotType) -> ResultType:
        """Runs this step.

        Arguments:
            ctx: the context to use when executing the step.
            snapshot: data captured before running the step.

        Returns:
            The outcome of a step, potentially, used as input by other steps.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self, ctx: "Context", snapshot: SnapshotType):
        """Rolls back this step to the state captured in the snapshot.

        Arguments:
            ctx: the context to use when rolling back the step.
            snapshot: data captured before running the step.
        """
        raise NotImplementedError
