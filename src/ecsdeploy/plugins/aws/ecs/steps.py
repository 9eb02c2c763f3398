"""All the steps provided by the AWS ECS plugin."""
from typing import Union

from attrs import define

from ecsdeploy.core.context import Context
from ecsdeploy.core.step import Step
from ecsdeploy.plugins.aws.ecs.artifacts import TaskDefinitionFile
from ecsdeploy.plugins.aws.ecs.render import (
    prepare_registration,
    read_task_definition,
    render_task_definition,
    write_task_definition,
)
from ecsdeploy.plugins.aws.ecs.resources import Deployment, EcsServiceSnapshot, describe_service
from ecsdeploy.plugins.docker.artifacts import ImageReference
from ecsdeploy.utils import log, print_waiting

STABILITY_CHECK_DELAY = 15


@define(frozen=True, kw_only=True)
class DownloadTaskDefinition(Step):
    """Downloads the latest active revision of a task definition.

    Arguments:
        task_definition: the task definition family (or `family:revision`).
        filename: name of the file written in the revision work directory.

    Returns:
        The downloaded task definition file.
    """

    task_definition: str
    filename: str = "task-definition.json"

    @classmethod
    def spec_name(cls) -> str:
        return "aws_ecs_download_task_definition"

    def snapshot(self, ctx: Context) -> None:
        return None

    def run(self, ctx: Context, snapshot: None) -> TaskDefinitionFile:
        res = ctx.clients.aws("ecs").describe_task_definition(taskDefinition=self.task_definition)
        document = res["taskDefinition"]

        ctx.work_dir.mkdir(parents=True, exist_ok=True)
        path = ctx.work_dir.joinpath(self.filename)
        write_task_definition(path, document)

        log(f"downloaded task definition {document['family']}:{document['revision']}")

        return TaskDefinitionFile(
            family=document["family"],
            path=str(path),
            revision=document["revision"],
        )

    def rollback(self, ctx: Context, snapshot: None):
        pass


@define(frozen=True, kw_only=True)
class RenderTaskDefinition(Step):
    """Fills in the new image of a container in a task definition file.

    Arguments:
        task_definition: the task definition file to render.
        container_name: the name of the container to update.
        image: the new image, either its URI or the pushed image reference.
        filename: name of the rendered file in the revision work directory.

    Returns:
        The rendered task definition file.
    """

    task_definition: TaskDefinitionFile
    container_name: str
    image: Union[str, ImageReference]
    filename: str = "task-definition-rendered.json"

    @classmethod
    def spec_name(cls) -> str:
        return "aws_ecs_render_task_definition"

    def snapshot(self, ctx: Context) -> None:
        return None

    def run(self, ctx: Context, snapshot: None) -> TaskDefinitionFile:
        image = self.image.uri if isinstance(self.image, ImageReference) else self.image

        document = read_task_definition(self.task_definition.path)
        rendered = render_task_definition(document, self.container_name, image)

        ctx.work_dir.mkdir(parents=True, exist_ok=True)
        path = ctx.work_dir.joinpath(self.filename)
        write_task_definition(path, rendered)

        log(f"set image of container {self.container_name} to {image}")

        return TaskDefinitionFile(
            family=self.task_definition.family,
            path=str(path),
        )

    def rollback(self, ctx: Context, snapshot: None):
        pass


@define(frozen=True, kw_only=True)
class DeployTaskDefinition(Step):
    """Registers a task definition and updates an ECS service to use it.

    Rolling back points the service to the task definition it used before
    the deploy.

    Arguments:
        task_definition: the rendered task definition file.
        cluster: the cluster hosting the service.
        service: the service to update.
        force_new_deployment: start new tasks even if the definition is unchanged.
        wait_for_stability: wait for the service to reach a steady state.
        wait_minutes: how long to wait for the service to be stable.

    Returns:
        The service deployment.
    """

    task_definition: TaskDefinitionFile
    cluster: str
    service: str
    force_new_deployment: bool = False
    wait_for_stability: bool = False
    wait_minutes: int = 30

    @classmethod
    def spec_name(cls) -> str:
        return "aws_ecs_deploy_task_definition"

    def snapshot(self, ctx: Context) -> EcsServiceSnapshot:
        description = describe_service(ctx.clients.aws("ecs"), self.cluster, self.service)

        return EcsServiceSnapshot(task_definition_arn=description["taskDefinition"])

    def run(self, ctx: Context, snapshot: EcsServiceSnapshot) -> Deployment:
        ecs = ctx.clients.aws("ecs")

        arguments = prepare_registration(read_task_definition(self.task_definition.path))
        res = ecs.register_task_definition(**arguments)
        task_definition_arn = res["taskDefinition"]["taskDefinitionArn"]

        log(f"registered task definition {task_definition_arn}")

        self._update_service(ctx, task_definition_arn)

        return Deployment(
            cluster=self.cluster,
            service=self.service,
            task_definition_arn=task_definition_arn,
        )

    def rollback(self, ctx: Context, snapshot: EcsServiceSnapshot):
        if snapshot is None:
            raise ValueError("snapshot unavailable")

        self._update_service(ctx, snapshot.task_definition_arn)

    def _update_service(self, ctx: Context, task_definition_arn: str):
        ecs = ctx.clients.aws("ecs")

        ecs.update_service(
            cluster=self.cluster,
            service=self.service,
            taskDefinition=task_definition_arn,
            forceNewDeployment=self.force_new_deployment,
        )

        log(f"service {self.service} updated to {task_definition_arn}")

        if not self.wait_for_stability:
            return

        with print_waiting(f"waiting for service {self.service} to be stable"):
            ecs.get_waiter("services_stable").wait(
                cluster=self.cluster,
                services=[self.service],
                WaiterConfig={
                    "Delay": STABILITY_CHECK_DELAY,
                    "MaxAttempts": self.wait_minutes * 60 // STABILITY_CHECK_DELAY,
                },
            )
