"""Helpers used to add step types to ecsdeploy."""
from importlib import import_module
from typing import List, Type, cast

from attrs import define

from ecsdeploy.core.step import Step


@define(frozen=True, kw_only=True)
class Plugin:
    """An ecsdeploy plugin that provides step types."""

    namespace: str
    steps: List[Type[Step]]


def load_plugin(module: str) -> Plugin:
    """Loads a plugin that exposes step types in a submodule `register`.

    Arguments:
        module: import path of the plugin.
    """
    register = import_module(f"{module}.register")

    steps = cast(List[Type[Step]], list(getattr(register, "steps", lambda: [])()))

    return Plugin(
        namespace=register.namespace(),
        steps=steps,
    )
