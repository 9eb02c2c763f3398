"""Resources used to represent ECS services."""
from typing import Any, Dict

from attrs import define


class ServiceNotFound(Exception):
    """Raised when the ECS service to deploy does not exist or is not
    active."""

    def __init__(self, cluster: str, service: str) -> None:
        super().__init__(cluster, service)

        self.cluster = cluster
        self.service = service

    def __str__(self):
        return f"service {self.service} not found in cluster {self.cluster}"


@define(frozen=True, kw_only=True)
class EcsServiceSnapshot:
    """A snapshot taken for an ECS service before deploying.

    Arguments:
        task_definition_arn: the task definition used by the service.
    """

    task_definition_arn: str


@define(frozen=True, kw_only=True)
class Deployment:
    """An ECS service running a task definition.

    Arguments:
        cluster: the cluster hosting the service.
        service: the service name.
        task_definition_arn: the task definition used by the service.
    """

    cluster: str
    service: str
    task_definition_arn: str


def describe_service(ecs, cluster: str, service: str) -> Dict[str, Any]:
    """Fetches the description of an active ECS service.

    Arguments:
        ecs: the ECS client.
        cluster: the cluster hosting the service.
        service: the service name.

    Raises:
        ServiceNotFound: if the service is missing or inactive.
    """
    res = ecs.describe_services(cluster=cluster, services=[service])

    for description in res["services"]:
        if description["status"] == "ACTIVE":
            return description

    raise ServiceNotFound(cluster=cluster, service=service)
