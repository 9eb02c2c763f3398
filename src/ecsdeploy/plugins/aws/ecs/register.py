"""Register the AWS ECS plugin."""
from typing import Sequence, Type

from ecsdeploy.core.step import Step
from ecsdeploy.plugins.aws.ecs.steps import (
    DeployTaskDefinition,
    DownloadTaskDefinition,
    RenderTaskDefinition,
)


def namespace() -> str:
    """Returns the namespace for the AWS ECS plugin."""
    return "aws_ecs"


def steps() -> Sequence[Type[Step]]:
    """Returns all AWS ECS steps."""
    return [DownloadTaskDefinition, RenderTaskDefinition, DeployTaskDefinition]
