"""Definition of the context capturing all the data needed to run
ecsdeploy."""
from pathlib import Path
from typing import Dict, Type

from attrs import define, field

from ecsdeploy.core.clients import Clients
from ecsdeploy.core.config import Config
from ecsdeploy.core.plugin import load_plugin
from ecsdeploy.core.step import Step


@define(frozen=True, kw_only=True)
class Context:
    """Contains all the data needed to run any ecsdeploy command.

    Arguments:
        config: ecsdeploy's configuration.
        revision: the commit SHA being deployed.
        specs: all the registered step types, by type name.
        clients: AWS and Docker clients shared by the steps.
    """

    config: Config
    revision: str
    specs: Dict[str, Type[Step]] = field(factory=dict)
    clients: Clients = field(factory=Clients, eq=False, repr=False)

    @property
    def work_dir(self) -> Path:
        """Directory where the files generated for this revision are
        written."""
        return Path(self.config.project.repo_path).joinpath(
            self.config.project.work_dir, self.revision
        )


def load_context(config: Config, revision: str) -> Context:
    """Prepares the context to be used in ecsdeploy.

    Arguments:
        config: ecsdeploy's configuration.
        revision: the commit SHA being deployed.

    Returns:
        The context.

    Raises:
        ValueError: if two plugins register a step type with the same name.
    """
    specs: Dict[str, Type[Step]] = {}

    for plugin_path in config.plugins:
        plugin = load_plugin(plugin_path)

        for spec in plugin.steps:
            name = spec.spec_name()
            if name in specs:
                raise ValueError(f"step type {name} is already registered")

            specs[name] = spec

    return Context(
        config=config,
        specs=specs,
        revision=revision,
    )
