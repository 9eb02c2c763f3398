"""Register the AWS credentials plugin."""
from typing import Sequence, Type

from ecsdeploy.core.step import Step
from ecsdeploy.plugins.aws.credentials.steps import ConfigureCredentials


def namespace() -> str:
    """Returns the namespace for the AWS credentials plugin."""
    return "aws_credentials"


def steps() -> Sequence[Type[Step]]:
    """Returns all AWS credentials steps."""
    return [ConfigureCredentials]
