"""Manages the deployment state, optionally persisted in Git."""

import json
from pathlib import Path
from typing import Optional

from attrs import define
from cattrs import structure, unstructure

from ecsdeploy.core import git
from ecsdeploy.core.context import Context
from ecsdeploy.core.plan import Plan


def get_base_path(ctx: Context) -> Path:
    """Gets the path to the state directory.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.

    Returns:
        Path to the state directory.
    """
    if ctx.config.state.base_path is None:
        return Path(ctx.config.state.repo_path)

    return Path(ctx.config.state.repo_path).joinpath(ctx.config.state.base_path)


def get_revisions_path(ctx: Context) -> Path:
    """Gets the path to the directory containing all the revisions.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.

    Returns:
        Path to the revisions directory.
    """
    return get_base_path(ctx).joinpath("revisions")


def get_revision_path(ctx: Context) -> Path:
    """Gets the path to the directory containing the data of the current
    revision.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.

    Returns:
        Path to a revision directory.
    """
    return get_revisions_path(ctx).joinpath(ctx.revision)


def init_state(ctx: Context):
    """Creates the directories used as state storage.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.
    """
    get_revisions_path(ctx).mkdir(parents=True, exist_ok=True)


def init_revision(ctx: Context):
    """Creates the directory containing the state of the current revision.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.
    """
    get_revision_path(ctx).mkdir(parents=True, exist_ok=True)


@define(frozen=True, kw_only=True)
class Revision:
    """Contains all the information about the current state of a deployment
    from a specific revision.

    Arguments:
        plan: the current state of the plan.
        rollback: the state of the last rollback plan, if any.
    """

    plan: Plan
    rollback: Optional[Plan] = None

    @property
    def deployed(self) -> bool:
        """True if the plan completed and no rollback completed after it."""
        if not self.plan.completed:
            return False

        return self.rollback is None or not self.rollback.completed


def save_revision(ctx: Context, revision: Revision):
    """Persists the revision state, committing and pushing it if configured.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.
        revision: revision state to store.
    """
    state_path = get_revision_path(ctx).joinpath("state.json")

    with open(state_path, "w", encoding="utf-8") as state_file:
        encoded = unstructure(revision)
        state_file.write(json.dumps(encoded, indent=4, sort_keys=True))

    if not ctx.config.state.commit:
        return

    git.commit(
        path=ctx.config.state.repo_path,
        paths=[str(state_path.absolute())],
        message=f"update state for revision {ctx.revision}",
    )

    if ctx.config.state.push:
        git.push(path=ctx.config.state.repo_path, remote_location=ctx.config.state.remote_location)


def load_revision(ctx: Context) -> Optional[Revision]:
    """Loads the current revision state from a file.

    Arguments:
        ctx: ecsdeploy's context containing the state configuration.

    Returns:
        The revision state if present. Otherwise, returns `None`.
    """
    state_path = get_revision_path(ctx).joinpath("state.json")

    try:
        with open(state_path, encoding="utf-8") as state_file:
            decoded = json.loads(state_file.read())

    except FileNotFoundError:
        return None

    return structure(decoded, Revision)
