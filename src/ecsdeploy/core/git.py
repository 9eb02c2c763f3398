"""Contains all the integrations with Git."""
from typing import List, Optional

from dulwich import porcelain
from dulwich.repo import Repo


def get_current_commit(path: str) -> str:
    """Returns the SHA commit for the current HEAD.

    Arguments:
        path: path to the repository's directory.

    Returns:
        The head's commit SHA.
    """
    repo = Repo(path)

    return repo.head().decode("utf-8")


def get_current_branch(path: str) -> Optional[str]:
    """Returns the name of the branch checked out in the repository.

    Arguments:
        path: path to the repository's directory.

    Returns:
        The branch name. None if HEAD is detached.
    """
    repo = Repo(path)

    try:
        return porcelain.active_branch(repo).decode("utf-8")

    except (IndexError, ValueError):
        return None


def is_clean(path: str) -> bool:
    """Checks if the working tree has no staged or unstaged changes.

    Untracked files are ignored.

    Arguments:
        path: path to the repository's directory.
    """
    status = porcelain.status(path)

    return not any(status.staged.values()) and not status.unstaged


def clone(url: str, target: str, revision: str) -> str:
    """Clones a repository and checks out the given revision.

    Arguments:
        url: location of the repository to clone.
        target: directory where the repository is cloned.
        revision: the commit to check out.

    Returns:
        The SHA of the checked out commit.
    """
    repo = porcelain.clone(url, target, checkout=True)
    porcelain.reset(repo, "hard", revision.encode("utf-8"))

    return repo.head().decode("utf-8")


def commit(path: str, paths: List[str], message: str) -> bytes:
    """Stages the given files and commits them in the given repository.

    Arguments:
        path: path to the repository's directory.
        paths: absolute paths of the files to stage.
        message: the commit message.
    """
    repo = Repo(path)

    porcelain.add(repo, paths=paths)

    return porcelain.commit(repo, message.encode("utf-8"))


def push(path: str, remote_location: Optional[str]):
    """Pushes a change to a remote repository.

    Arguments:
        path: path to the repository's directory.
        remote_location: location of the remote. The default remote is used
            when not set.
    """
    repo = Repo(path)

    porcelain.push(repo, remote_location)
