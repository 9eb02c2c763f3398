"""Functions patching task definition documents."""
import copy
import json
from pathlib import Path
from typing import Any, Dict

# Returned by DescribeTaskDefinition but rejected by RegisterTaskDefinition.
REGISTRATION_FIELDS = (
    "compatibilities",
    "deregisteredAt",
    "registeredAt",
    "registeredBy",
    "requiresAttributes",
    "revision",
    "status",
    "taskDefinitionArn",
)


class ContainerNotFound(Exception):
    """Raised when the task definition has no container with the given
    name."""

    def __init__(self, container_name: str) -> None:
        super().__init__(container_name)

        self.container_name = container_name

    def __str__(self):
        return f"no container definition named {self.container_name}"


def read_task_definition(path: Path | str) -> Dict[str, Any]:
    """Loads a task definition document.

    Both the `taskDefinition` object alone and the whole output of
    `aws ecs describe-task-definition` are accepted.
    """
    with open(path, encoding="utf-8") as task_definition_file:
        document = json.loads(task_definition_file.read())

    if "taskDefinition" in document:
        return document["taskDefinition"]

    return document


def write_task_definition(path: Path | str, document: Dict[str, Any]):
    """Writes a task definition document as indented JSON."""
    with open(path, "w", encoding="utf-8") as task_definition_file:
        task_definition_file.write(json.dumps(document, indent=2, sort_keys=True))


def render_task_definition(
    document: Dict[str, Any], container_name: str, image: str
) -> Dict[str, Any]:
    """Sets the image of a container in a task definition.

    Arguments:
        document: the task definition to patch. It is not modified.
        container_name: the name of the container definition to update.
        image: the new image reference.

    Returns:
        A copy of the task definition using the new image.

    Raises:
        ContainerNotFound: if no container definition has the given name.
    """
    rendered = copy.deepcopy(document)

    for container in rendered.get("containerDefinitions", []):
        if container.get("name") == container_name:
            container["image"] = image
            return rendered

    raise ContainerNotFound(container_name)


def _clean_empty(value: Any) -> Any:
    if isinstance(value, dict):
        cleaned = {key: _clean_empty(nested) for key, nested in value.items()}
        return {key: nested for key, nested in cleaned.items() if nested not in (None, [], {})}

    if isinstance(value, list):
        return [_clean_empty(nested) for nested in value]

    return value


def prepare_registration(document: Dict[str, Any]) -> Dict[str, Any]:
    """Converts a described task definition into the arguments of
    `RegisterTaskDefinition`, dropping the read-only fields and the empty
    values.
    """
    arguments = {
        key: value for key, value in document.items() if key not in REGISTRATION_FIELDS
    }

    return _clean_empty(arguments)
