"""All the steps provided by the Git plugin."""
import shutil
from typing import Optional

from attrs import define

from ecsdeploy.core import git
from ecsdeploy.core.context import Context
from ecsdeploy.core.step import Step
from ecsdeploy.plugins.git.artifacts import SourceTree
from ecsdeploy.utils import log, print_waiting


class RevisionMismatch(Exception):
    """Raised when the checked out commit is not the revision to deploy."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(expected, actual)

        self.expected = expected
        self.actual = actual

    def __str__(self):
        return f"checked out commit is {self.actual} but revision {self.expected} is being deployed"


class DirtyWorkingTree(Exception):
    """Raised when the project repository has uncommitted changes."""

    def __init__(self, path: str) -> None:
        super().__init__(path)

        self.path = path

    def __str__(self):
        return f"working tree {self.path} has uncommitted changes"


@define(frozen=True, kw_only=True)
class GitCheckout(Step):
    """Fetches the project sources at the revision being deployed.

    Without `url`, the project repository is used as is and its HEAD must
    point to the revision. With `url`, the repository is cloned in the
    revision work directory and reset to the revision.

    Arguments:
        url: location of the repository to clone.
        allow_dirty: accept uncommitted changes in the project repository.

    Returns:
        The source tree to build from.
    """

    url: Optional[str] = None
    allow_dirty: bool = False

    @classmethod
    def spec_name(cls) -> str:
        return "git_checkout"

    def snapshot(self, ctx: Context) -> None:
        return None

    def run(self, ctx: Context, snapshot: None) -> SourceTree:
        if self.url is not None:
            return self._clone(ctx)

        path = ctx.config.project.repo_path

        head = git.get_current_commit(path)
        if head != ctx.revision:
            raise RevisionMismatch(expected=ctx.revision, actual=head)

        if not self.allow_dirty and not git.is_clean(path):
            raise DirtyWorkingTree(path)

        return SourceTree(
            path=path,
            revision=head,
            branch=git.get_current_branch(path),
        )

    def _clone(self, ctx: Context) -> SourceTree:
        target = ctx.work_dir.joinpath("source")
        if target.exists():
            shutil.rmtree(target)

        target.parent.mkdir(parents=True, exist_ok=True)

        with print_waiting(f"cloning {self.url}"):
            head = git.clone(self.url, str(target), ctx.revision)

        if head != ctx.revision:
            raise RevisionMismatch(expected=ctx.revision, actual=head)

        log(f"checked out {head} in {target}")

        return SourceTree(
            path=str(target),
            revision=head,
            branch=None,
        )

    def rollback(self, ctx: Context, snapshot: None):
        pass
