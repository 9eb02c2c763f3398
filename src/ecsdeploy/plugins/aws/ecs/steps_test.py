import json

import pytest
from testfixtures import ShouldRaise, compare

from ecsdeploy.plugins.aws.ecs.artifacts import TaskDefinitionFile
from ecsdeploy.plugins.aws.ecs.render import ContainerNotFound, read_task_definition
from ecsdeploy.plugins.aws.ecs.resources import Deployment, EcsServiceSnapshot, ServiceNotFound
from ecsdeploy.plugins.aws.ecs.steps import (
    DeployTaskDefinition,
    DownloadTaskDefinition,
    RenderTaskDefinition,
)
from ecsdeploy.plugins.docker.artifacts import ImageReference

OLD_ARN = "arn:aws:ecs:eu-central-1:123456789012:task-definition/static-www-task:7"
NEW_ARN = "arn:aws:ecs:eu-central-1:123456789012:task-definition/static-www-task:8"

TASK_DEFINITION = {
    "taskDefinitionArn": OLD_ARN,
    "family": "static-www-task",
    "revision": 7,
    "status": "ACTIVE",
    "compatibilities": ["FARGATE"],
    "containerDefinitions": [
        {
            "name": "static-www",
            "image": "registry/df1/static-www:old",
            "essential": True,
            "environment": [],
        }
    ],
}


@pytest.fixture
def task_definition_file(tmp_path) -> TaskDefinitionFile:
    path = tmp_path / "task-definition.json"
    path.write_text(json.dumps(TASK_DEFINITION))

    return TaskDefinitionFile(family="static-www-task", path=str(path), revision=7)


def test_DownloadTaskDefinition__writes_document_to_work_dir(ecsdeploy_context, aws_clients):
    aws_clients["ecs"].describe_task_definition.return_value = {"taskDefinition": TASK_DEFINITION}
    step = DownloadTaskDefinition(name="download-task-def", task_definition="static-www-task")

    res = step.run(ecsdeploy_context, step.snapshot(ecsdeploy_context))

    path = ecsdeploy_context.work_dir / "task-definition.json"
    compare(res, TaskDefinitionFile(family="static-www-task", path=str(path), revision=7))
    compare(read_task_definition(path), TASK_DEFINITION)
    aws_clients["ecs"].describe_task_definition.assert_called_once_with(
        taskDefinition="static-www-task"
    )


def test_RenderTaskDefinition__fills_in_image_uri(ecsdeploy_context, task_definition_file):
    step = RenderTaskDefinition(
        name="task-def",
        task_definition=task_definition_file,
        container_name="static-www",
        image="registry/df1/static-www:abc",
    )

    res = step.run(ecsdeploy_context, None)

    path = ecsdeploy_context.work_dir / "task-definition-rendered.json"
    compare(res, TaskDefinitionFile(family="static-www-task", path=str(path)))
    compare(
        read_task_definition(path)["containerDefinitions"][0]["image"],
        "registry/df1/static-www:abc",
    )


def test_RenderTaskDefinition__accepts_image_reference(ecsdeploy_context, task_definition_file):
    step = RenderTaskDefinition(
        name="task-def",
        task_definition=task_definition_file,
        container_name="static-www",
        image=ImageReference(registry="registry", repository="df1/static-www", tag="abc"),
    )

    res = step.run(ecsdeploy_context, None)

    compare(
        read_task_definition(res.path)["containerDefinitions"][0]["image"],
        "registry/df1/static-www:abc",
    )


def test_RenderTaskDefinition__raises_ContainerNotFound(ecsdeploy_context, task_definition_file):
    step = RenderTaskDefinition(
        name="task-def",
        task_definition=task_definition_file,
        container_name="web",
        image="registry/df1/static-www:abc",
    )

    with ShouldRaise(ContainerNotFound("web")):
        step.run(ecsdeploy_context, None)


def _deploy_step(task_definition_file, **kwargs) -> DeployTaskDefinition:
    return DeployTaskDefinition(
        name="deploy",
        task_definition=task_definition_file,
        cluster="df1-cluster",
        service="static-www-service",
        **kwargs,
    )


def test_DeployTaskDefinition__snapshot_captures_current_task_definition(
    ecsdeploy_context, aws_clients, task_definition_file
):
    aws_clients["ecs"].describe_services.return_value = {
        "services": [{"status": "ACTIVE", "taskDefinition": OLD_ARN}],
        "failures": [],
    }

    res = _deploy_step(task_definition_file).snapshot(ecsdeploy_context)

    compare(res, EcsServiceSnapshot(task_definition_arn=OLD_ARN))
    aws_clients["ecs"].describe_services.assert_called_once_with(
        cluster="df1-cluster", services=["static-www-service"]
    )


@pytest.mark.parametrize(
    ["services"],
    [
        ([],),
        ([{"status": "INACTIVE", "taskDefinition": OLD_ARN}],),
    ],
)
def test_DeployTaskDefinition__snapshot_raises_ServiceNotFound(
    services, ecsdeploy_context, aws_clients, task_definition_file
):
    aws_clients["ecs"].describe_services.return_value = {"services": services, "failures": []}

    with ShouldRaise(ServiceNotFound(cluster="df1-cluster", service="static-www-service")):
        _deploy_step(task_definition_file).snapshot(ecsdeploy_context)


def test_DeployTaskDefinition__registers_and_updates_service(
    ecsdeploy_context, aws_clients, task_definition_file
):
    ecs = aws_clients["ecs"]
    ecs.register_task_definition.return_value = {"taskDefinition": {"taskDefinitionArn": NEW_ARN}}

    res = _deploy_step(task_definition_file).run(
        ecsdeploy_context, EcsServiceSnapshot(task_definition_arn=OLD_ARN)
    )

    compare(
        res,
        Deployment(cluster="df1-cluster", service="static-www-service", task_definition_arn=NEW_ARN),
    )
    ecs.register_task_definition.assert_called_once_with(
        family="static-www-task",
        containerDefinitions=[
            {
                "name": "static-www",
                "image": "registry/df1/static-www:old",
                "essential": True,
            }
        ],
    )
    ecs.update_service.assert_called_once_with(
        cluster="df1-cluster",
        service="static-www-service",
        taskDefinition=NEW_ARN,
        forceNewDeployment=False,
    )
    ecs.get_waiter.assert_not_called()


def test_DeployTaskDefinition__waits_for_stability(ecsdeploy_context, aws_clients, task_definition_file):
    ecs = aws_clients["ecs"]
    ecs.register_task_definition.return_value = {"taskDefinition": {"taskDefinitionArn": NEW_ARN}}

    _deploy_step(task_definition_file, wait_for_stability=True, wait_minutes=10).run(
        ecsdeploy_context, EcsServiceSnapshot(task_definition_arn=OLD_ARN)
    )

    ecs.get_waiter.assert_called_once_with("services_stable")
    ecs.get_waiter.return_value.wait.assert_called_once_with(
        cluster="df1-cluster",
        services=["static-www-service"],
        WaiterConfig={"Delay": 15, "MaxAttempts": 40},
    )


def test_DeployTaskDefinition__rollback_restores_previous_task_definition(
    ecsdeploy_context, aws_clients, task_definition_file
):
    _deploy_step(task_definition_file).rollback(
        ecsdeploy_context, EcsServiceSnapshot(task_definition_arn=OLD_ARN)
    )

    aws_clients["ecs"].update_service.assert_called_once_with(
        cluster="df1-cluster",
        service="static-www-service",
        taskDefinition=OLD_ARN,
        forceNewDeployment=False,
    )
    aws_clients["ecs"].register_task_definition.assert_not_called()


def test_DeployTaskDefinition__rollback_requires_snapshot(ecsdeploy_context, task_definition_file):
    with ShouldRaise(ValueError("snapshot unavailable")):
        _deploy_step(task_definition_file).rollback(ecsdeploy_context, None)
