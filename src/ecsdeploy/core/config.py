"""Functions and data structures used to represent and manage ecsdeploy
configuration."""
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
from attrs import define, field
from cattrs import structure

DEFAULT_PLUGINS = [
    "ecsdeploy.plugins.git",
    "ecsdeploy.plugins.aws.credentials",
    "ecsdeploy.plugins.aws.ecr",
    "ecsdeploy.plugins.aws.ecs",
    "ecsdeploy.plugins.docker",
]


@define(frozen=True, kw_only=True)
class StateConfig:
    """Configuration for the state storage.

    Arguments:
        repo_path: path to the repository used to store the state.
        base_path: sub-directory of the repository containing the state.
        commit: commit every state change in the state repository.
        push: push the state repository after every commit.
        remote_location: remote used when pushing the state.
    """

    repo_path: str
    base_path: Optional[str] = None
    commit: bool = False
    push: bool = False
    remote_location: Optional[str] = None


@define(frozen=True, kw_only=True)
class ProjectConfig:
    """Configuration for a project.

    Arguments:
        repo_path: path to the project's repository.
        work_dir: directory, relative to the repository, where the files
            generated during a deploy are written.
    """

    repo_path: str
    work_dir: str = ".ecsdeploy"


@define(frozen=True, kw_only=True)
class TriggerConfig:
    """Source-control event that triggers a deploy.

    Arguments:
        branch: only commits on this branch get deployed.
    """

    branch: str = "main"


@define(frozen=True, kw_only=True)
class AwsConfig:
    """How to reach and authenticate against AWS.

    The secrets are never written in the configuration file, only the name
    of the environment variables holding them.

    Arguments:
        region: the AWS region hosting the registry and the cluster.
        access_key_id_env: variable containing the access key id.
        secret_access_key_env: variable containing the secret access key.
        account_id_env: variable containing the expected account id.
    """

    region: str
    access_key_id_env: str = "AWS_ACCESS_KEY_ID"
    secret_access_key_env: str = "AWS_SECRET_ACCESS_KEY"
    account_id_env: str = "AWS_ACCOUNT_ID"


@define(frozen=True, kw_only=True)
class RecipeConfig:
    """Declarative recipe for the container image.

    Arguments:
        base_image: image used in the `FROM` instruction.
        source: directory, relative to the build context, to copy in the image.
        destination: where `source` is copied inside the image.
        port: port exposed by the container.
        command: foreground command launched by the container.
    """

    base_image: str = "nginx:alpine"
    source: str = "./src"
    destination: str = "/usr/share/nginx/html"
    port: int = 80
    command: List[str] = field(factory=lambda: ["nginx", "-g", "daemon off;"])


@define(frozen=True, kw_only=True)
class Config:
    """ecsdeploy's configuration.

    Arguments:
        state: configuration for the state storage.
        project: the project deployed by ecsdeploy.
        aws: AWS region and credentials lookup.
        trigger: the event triggering a deploy.
        recipe: optional container recipe.
        plugins: all the plugins to load.
        steps: the pipeline steps, in execution order.
    """

    state: StateConfig
    project: ProjectConfig
    aws: AwsConfig
    trigger: TriggerConfig = field(factory=TriggerConfig)
    recipe: Optional[RecipeConfig] = None
    plugins: List[str] = field(factory=lambda: list(DEFAULT_PLUGINS))
    steps: List[Dict[str, Any]] = field(factory=list)


def load_config(path: Path | str) -> Config:
    """Loads the configuration from a file.

    Arguments:
        path: configuration file's path.
    """
    config = toml.load(path)

    return structure(config, Config)
