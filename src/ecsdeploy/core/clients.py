"""API clients shared by the steps of a pipeline run."""
import os
from typing import Any, Dict, Optional

import boto3
import docker

from ecsdeploy.core.config import AwsConfig


class CredentialsNotBound(Exception):
    """Raised when an AWS client is requested before any credentials have
    been bound to the run."""

    def __str__(self):
        return "AWS credentials are not bound, run the credentials step first"


class MissingSecret(Exception):
    """Raised when an operator supplied secret is not set.

    Arguments:
        variable: the environment variable expected to hold the secret.
    """

    def __init__(self, variable: str) -> None:
        super().__init__(variable)

        self.variable = variable

    def __str__(self):
        return f"environment variable {self.variable} is not set"


class AccountMismatch(Exception):
    """Raised when the credentials belong to an unexpected AWS account."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(expected, actual)

        self.expected = expected
        self.actual = actual

    def __str__(self):
        return f"credentials belong to account {self.actual}, expected {self.expected}"


def create_session(aws: AwsConfig, region: Optional[str] = None) -> boto3.Session:
    """Creates an AWS session from the static secrets found in the
    environment.

    Arguments:
        aws: the AWS configuration naming the variables holding the secrets.
        region: overrides the configured region.

    Raises:
        MissingSecret: if the access key or the secret key is not set.
    """
    access_key_id = os.environ.get(aws.access_key_id_env)
    if not access_key_id:
        raise MissingSecret(aws.access_key_id_env)

    secret_access_key = os.environ.get(aws.secret_access_key_env)
    if not secret_access_key:
        raise MissingSecret(aws.secret_access_key_env)

    return boto3.Session(
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name=region or aws.region,
    )


class Clients:
    """Creates and caches the clients used to talk to AWS and Docker.

    AWS clients are created from the session bound by the credentials step,
    the Docker client is created from the environment on first use.

    Arguments:
        session: an already authenticated AWS session.
        docker_client: the Docker client to use instead of the one created
            from the environment.
    """

    def __init__(
        self,
        session: Optional[boto3.Session] = None,
        docker_client: Optional[docker.DockerClient] = None,
    ):
        self._session = session
        self._docker = docker_client
        self._aws: Dict[str, Any] = {}

    @property
    def bound(self) -> bool:
        """True if an AWS session has been bound."""
        return self._session is not None

    @property
    def session(self) -> boto3.Session:
        """The bound AWS session.

        Raises:
            CredentialsNotBound: if no session has been bound yet.
        """
        if self._session is None:
            raise CredentialsNotBound()

        return self._session

    def bind(self, session: boto3.Session):
        """Binds an AWS session, dropping the clients created from a previous
        one.

        Arguments:
            session: the authenticated session.
        """
        self._session = session
        self._aws = {}

    def aws(self, service_name: str) -> Any:
        """Gets a client for an AWS service (i.e. `ecs`, `ecr`).

        Arguments:
            service_name: the AWS service name as used by boto3.
        """
        if service_name not in self._aws:
            self._aws[service_name] = self.session.client(service_name)

        return self._aws[service_name]

    def docker(self) -> docker.DockerClient:
        """Gets the Docker client."""
        if self._docker is None:
            self._docker = docker.from_env()

        return self._docker


def verify_session(aws: AwsConfig, session: boto3.Session) -> Dict[str, str]:
    """Checks who the session credentials belong to.

    When the account id variable named in the configuration is set, the
    credentials must belong to that account.

    Arguments:
        aws: the AWS configuration naming the expected account variable.
        session: the session to verify.

    Returns:
        The caller identity returned by STS.

    Raises:
        AccountMismatch: if the credentials belong to another account.
    """
    identity = session.client("sts").get_caller_identity()

    expected = os.environ.get(aws.account_id_env)
    if expected and expected != identity["Account"]:
        raise AccountMismatch(expected=expected, actual=identity["Account"])

    return identity
