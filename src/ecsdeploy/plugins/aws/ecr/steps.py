"""Steps authenticating the Docker client against ECR."""
import base64
from typing import Optional, Tuple

from attrs import define

from ecsdeploy.core.context import Context
from ecsdeploy.core.step import Step
from ecsdeploy.plugins.aws.credentials.steps import AwsIdentity
from ecsdeploy.plugins.aws.ecr.artifacts import Registry
from ecsdeploy.utils import log, print_waiting


def decode_authorization_token(token: str) -> Tuple[str, str]:
    """Decodes an ECR authorization token into its username and password."""
    username, _, password = base64.b64decode(token).decode("utf-8").partition(":")

    return username, password


@define(frozen=True, kw_only=True)
class EcrLogin(Step):
    """Logs the Docker client in to the ECR registry of the account.

    Arguments:
        identity: the identity bound by the credentials step. Its account is
            the registry to log in to.

    Returns:
        The registry; the password is never part of the result.
    """

    identity: Optional[AwsIdentity] = None

    @classmethod
    def spec_name(cls) -> str:
        return "aws_ecr_login"

    def snapshot(self, ctx: Context) -> None:
        return None

    def run(self, ctx: Context, snapshot: None) -> Registry:
        ecr = ctx.clients.aws("ecr")

        if self.identity is None:
            res = ecr.get_authorization_token()
        else:
            res = ecr.get_authorization_token(registryIds=[self.identity.account_id])

        auth = res["authorizationData"][0]
        username, password = decode_authorization_token(auth["authorizationToken"])
        host = auth["proxyEndpoint"].removeprefix("https://")

        with print_waiting(f"logging in to {host}"):
            ctx.clients.docker().login(
                username=username,
                password=password,
                registry=auth["proxyEndpoint"],
                reauth=True,
            )

        log(f"logged in to registry {host}")

        return Registry(host=host, username=username)

    def rollback(self, ctx: Context, snapshot: None):
        pass
