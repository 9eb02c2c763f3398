"""Steps binding the AWS credentials to a pipeline run."""
from typing import Optional

from attrs import define

from ecsdeploy.core.clients import create_session, verify_session
from ecsdeploy.core.context import Context
from ecsdeploy.core.step import Step
from ecsdeploy.utils import log


@define(frozen=True, kw_only=True)
class AwsIdentity:
    """The AWS identity bound to the run.

    Arguments:
        account_id: the AWS account of the credentials.
        arn: the ARN of the IAM user or role.
        region: the region of the session.
    """

    account_id: str
    arn: str
    region: str


@define(frozen=True, kw_only=True)
class ConfigureCredentials(Step):
    """Authenticates against AWS with the static secrets supplied by the
    operator and binds the session to the run.

    The access key and the secret key are read from the environment variables
    named in the `[aws]` configuration. When the account id variable is set,
    the identity of the credentials must belong to that account.

    Arguments:
        region: overrides the configured region.

    Returns:
        The identity of the credentials.
    """

    region: Optional[str] = None

    @classmethod
    def spec_name(cls) -> str:
        return "aws_configure_credentials"

    def snapshot(self, ctx: Context) -> None:
        return None

    def run(self, ctx: Context, snapshot: None) -> AwsIdentity:
        session = create_session(ctx.config.aws, region=self.region)
        identity = verify_session(ctx.config.aws, session)

        ctx.clients.bind(session)
        log(f"using AWS account {identity['Account']} ({identity['Arn']})")

        return AwsIdentity(
            account_id=identity["Account"],
            arn=identity["Arn"],
            region=session.region_name,
        )

    def rollback(self, ctx: Context, snapshot: None):
        pass
