"""Builds the ordered pipeline of steps from the configuration."""
import copy
from functools import singledispatch
from typing import Any, Dict, List, Union, get_args, get_origin

from attrs import Attribute, fields, has
from cattrs import structure
from cattrs.errors import BaseValidationError

from ecsdeploy.core.address import Address, is_reference
from ecsdeploy.core.context import Context
from ecsdeploy.core.step import Step


class UnknownStepType(Exception):
    """Raised when the pipeline uses a step type that no plugin registered.

    Arguments:
        type_name: the unknown step type.
        known: all the registered step types.
    """

    def __init__(self, type_name: str, known: List[str]) -> None:
        super().__init__(type_name, known)

        self.type_name = type_name
        self.known = known

    def __str__(self):
        known_str = ", ".join(sorted(self.known))
        return f"unknown step type {self.type_name!r} (known types: {known_str})"


@singledispatch
def parse_references(value):
    """Replaces all the reference strings (i.e. `:checkout#path`) found in a
    raw parameter value with addresses.

    Arguments:
        value: the raw parameter value loaded from the configuration.

    Returns:
        A copy of the value with references replaced by `Address` instances.
    """
    return value


@parse_references.register
def parse_references_str(value: str):
    """See `parse_references`."""
    if is_reference(value):
        return Address.from_string(value)

    return value


@parse_references.register
def parse_references_dict(value: dict) -> dict:
    """See `parse_references`."""
    return {key: parse_references(nested_value) for key, nested_value in value.items()}


@parse_references.register
def parse_references_list(value: list) -> list:
    """See `parse_references`."""
    return [parse_references(nested_value) for nested_value in value]


class Pipeline:
    """The ordered list of steps to deploy a revision.

    Arguments:
        ctx: the context where to execute the pipeline.
    """

    def __init__(self, ctx: Context):
        self._ctx = ctx
        self._steps: Dict[Address, Step] = {}
        self._deps: Dict[Address, Dict[str, Any]] = {}

    def ctx(self) -> Context:
        """Gets the context where to execute the pipeline."""
        return self._ctx

    def steps(self) -> Dict[Address, Step]:
        """Returns a mapping of addresses to all steps, in execution order."""
        return dict(self._steps)

    def dependencies(self, address: Address) -> Dict[str, Any]:
        """Returns the parameters of a step, including the addresses of the
        results it depends on."""
        return copy.deepcopy(self._deps[address])

    def register_step(self, step: Step):
        """Appends a step to the pipeline.

        Arguments:
            step: the step to add.

        Raises:
            ValueError: if a step with the same name is already registered.
        """
        address = Address(name=step.name)

        if address in self._steps:
            raise ValueError(f"step {address} is already defined")

        self._steps[address] = step
        self._deps[address] = {
            field.name: getattr(step, field.name)
            for field in fields(type(step))
            if field.name != "name"
        }


def _result_types(type_) -> List[type]:
    candidates = get_args(type_) if get_origin(type_) is Union else (type_,)

    return [
        candidate for candidate in candidates if isinstance(candidate, type) and has(candidate)
    ]


def _has_references(value) -> bool:
    if isinstance(value, Address):
        return True

    if isinstance(value, dict):
        return any(_has_references(nested_value) for nested_value in value.values())

    if isinstance(value, list):
        return any(_has_references(nested_value) for nested_value in value)

    return False


def _structure_param(step_field: Attribute, value: Any) -> Any:
    """Structures a table written in place of a step result (i.e. a task
    definition file given by hand) into the result type of the field."""
    if not isinstance(value, dict):
        return value

    targets = _result_types(step_field.type)
    if not targets:
        return value

    if _has_references(value):
        raise ValueError(f"parameter {step_field.name!r} cannot mix a table and references")

    result_type = targets[0]

    try:
        return structure(value, result_type)

    except (BaseValidationError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(
            f"parameter {step_field.name!r} is not a valid {result_type.__name__}"
        ) from exc


def make_step(ctx: Context, raw: Dict[str, Any]) -> Step:
    """Instantiates a step from its configuration.

    Reference strings are replaced by addresses, tables given for parameters
    holding a step result are structured into that result type.

    Arguments:
        ctx: the context holding the registered step types.
        raw: the step table, with its `type`, `name` and parameters.

    Returns:
        The step.

    Raises:
        UnknownStepType: if no plugin provides the step type.
        ValueError: if the step parameters are invalid.
    """
    params = dict(raw)
    name = params.get("name")

    try:
        type_name = params.pop("type")

    except KeyError as exc:
        raise ValueError(f"step {name!r} has no type") from exc

    cls = ctx.specs.get(type_name)
    if cls is None:
        raise UnknownStepType(type_name, list(ctx.specs))

    step_fields = {step_field.name: step_field for step_field in fields(cls)}

    try:
        params = {key: parse_references(value) for key, value in params.items()}
        params = {
            key: _structure_param(step_fields[key], value) if key in step_fields else value
            for key, value in params.items()
        }

        return cls(**params)

    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid parameters for step {name!r}: {exc}") from exc


def prepare_pipeline(ctx: Context) -> Pipeline:
    """Generates the pipeline from the steps found in the configuration.

    Arguments:
        ctx: the context used to generate the pipeline.

    Returns:
        The pipeline for the project.
    """
    pipeline = Pipeline(ctx)

    for raw in ctx.config.steps:
        pipeline.register_step(make_step(ctx, raw))

    return pipeline
