from unittest import mock

import pytest
from testfixtures import ShouldRaise, compare

from ecsdeploy.core.clients import AccountMismatch, MissingSecret
from ecsdeploy.plugins.aws.credentials.steps import AwsIdentity, ConfigureCredentials

CALLER_IDENTITY = {
    "Account": "123456789012",
    "Arn": "arn:aws:iam::123456789012:user/deployer",
    "UserId": "AIDAEXAMPLE",
}


@pytest.fixture
def secrets(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIAEXAMPLE")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.delenv("AWS_ACCOUNT_ID", raising=False)


@pytest.fixture
def session():
    with mock.patch("ecsdeploy.plugins.aws.credentials.steps.create_session") as create_session:
        session = create_session.return_value
        session.region_name = "eu-central-1"
        session.client.return_value.get_caller_identity.return_value = CALLER_IDENTITY

        yield session


def test_ConfigureCredentials__binds_verified_session(secrets, session, ecsdeploy_context):
    step = ConfigureCredentials(name="credentials")

    res = step.run(ecsdeploy_context, step.snapshot(ecsdeploy_context))

    compare(
        res,
        AwsIdentity(
            account_id="123456789012",
            arn="arn:aws:iam::123456789012:user/deployer",
            region="eu-central-1",
        ),
    )
    session.client.assert_called_once_with("sts")
    compare(ecsdeploy_context.clients.session, session)


def test_ConfigureCredentials__checks_expected_account(secrets, session, ecsdeploy_context, monkeypatch):
    monkeypatch.setenv("AWS_ACCOUNT_ID", "210987654321")
    previous_session = ecsdeploy_context.clients.session
    step = ConfigureCredentials(name="credentials")

    with ShouldRaise(AccountMismatch(expected="210987654321", actual="123456789012")):
        step.run(ecsdeploy_context, None)

    compare(ecsdeploy_context.clients.session, previous_session)


def test_ConfigureCredentials__accepts_matching_account(secrets, session, ecsdeploy_context, monkeypatch):
    monkeypatch.setenv("AWS_ACCOUNT_ID", "123456789012")
    step = ConfigureCredentials(name="credentials")

    res = step.run(ecsdeploy_context, None)

    compare(res.account_id, "123456789012")


def test_ConfigureCredentials__propagates_MissingSecret(ecsdeploy_context, monkeypatch):
    monkeypatch.delenv("AWS_ACCESS_KEY_ID", raising=False)
    step = ConfigureCredentials(name="credentials")

    with ShouldRaise(MissingSecret("AWS_ACCESS_KEY_ID")):
        step.run(ecsdeploy_context, None)
