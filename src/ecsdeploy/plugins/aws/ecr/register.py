"""Register the AWS ECR plugin."""
from typing import Sequence, Type

from ecsdeploy.core.step import Step
from ecsdeploy.plugins.aws.ecr.steps import EcrLogin


def namespace() -> str:
    """Returns the namespace for the AWS ECR plugin."""
    return "aws_ecr"


def steps() -> Sequence[Type[Step]]:
    """Returns all AWS ECR steps."""
    return [EcrLogin]
