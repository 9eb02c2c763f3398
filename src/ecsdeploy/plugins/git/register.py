"""Register the Git plugin."""
from typing import Sequence, Type

from ecsdeploy.core.step import Step
from ecsdeploy.plugins.git.steps import GitCheckout


def namespace() -> str:
    """Returns the namespace for the Git plugin."""
    return "git"


def steps() -> Sequence[Type[Step]]:
    """Returns all Git steps."""
    return [GitCheckout]
