"""Register the Docker plugin."""
from typing import Sequence, Type

from ecsdeploy.core.step import Step
from ecsdeploy.plugins.docker.steps import DockerBuildPush


def namespace() -> str:
    """Returns the namespace for the Docker plugin."""
    return "docker"


def steps() -> Sequence[Type[Step]]:
    """Returns all Docker steps."""
    return [DockerBuildPush]
