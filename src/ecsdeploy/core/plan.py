"""Functions and data structures to handle and represent a plan describing
all the actions needed to complete a deployment."""
import enum
import operator
from functools import singledispatch
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from attrs import define, evolve, fields
from attrs import has as has_attrs

from ecsdeploy.core.address import Address

if TYPE_CHECKING:
    from ecsdeploy.core.pipeline import Pipeline


@enum.unique
class ActionState(enum.Enum):
    """Represents the state of an action during the pipeline execution.

    Attributes:

    * `PLANNED`: the action is ready to be executed.
    * `IN_PROGRESS`: the execution has started.
    * `DONE`: the execution completed successfully.
    * `FAILED`: the execution failed.
    * `CANCELLED`: a previous action failed and this one won't be executed.
    """

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    FAILED = "FAILED"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


@enum.unique
class ActionType(enum.Enum):
    """Describes what type of operation will be performed by an action.

    Attributes:

    * `RUN`: performs a step run.
    * `ROLLBACK`: performs a step rollback.
    """

    RUN = "RUN"
    ROLLBACK = "ROLLBACK"


@define(frozen=True, kw_only=True)
class Action:
    """Represents an action in a plan.

    Arguments:
        type: the operation to perform.
        address: the step's address to execute.
        state: the current state of the action execution.
        snapshot: data captured before running the step, if available.
        result: the final result of a successful execution, if available.
        error: the error of a failed action, if available.
    """

    type: ActionType
    address: Address
    state: ActionState = ActionState.PLANNED
    snapshot: Optional[Dict[str, Any]] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None


@define(frozen=True, kw_only=True)
class Plan:
    """Describes all the actions to perform in order to deploy a revision."""

    actions: List[Action]

    @property
    def completed(self) -> bool:
        """True if every action of the plan is done."""
        return all(action.state is ActionState.DONE for action in self.actions)

    @property
    def failed(self) -> bool:
        """True if any action of the plan failed."""
        return any(action.state is ActionState.FAILED for action in self.actions)


class UnresolvableAddress(Exception):
    """Raised when an address cannot be resolved into its actual value."""

    def __init__(self, address) -> None:
        super().__init__(address)

        self.address = address


@singledispatch
def resolve_addresses(value, mapping):  # pylint: disable=unused-argument
    """Visits the addresses in `value` and creates a copy with the same
    structure but replacing all the addresses with the corresponding result
    found in `mapping`.

    Arguments:
        value: the step parameters to resolve.
        mapping: contains all the known step results.

    Returns:
        A copy of the value with the addresses replaced by the results.

    Raises:
        UnresolvableAddress: if any of the addresses is missing in the mapping.
    """
    if has_attrs(type(value)):
        return resolve_addresses_attrs(value, mapping)

    return value


def resolve_addresses_attrs(value: Any, mapping) -> Any:
    """See `resolve_addresses`."""
    return evolve(
        value,
        **{
            field.name: resolve_addresses(getattr(value, field.name), mapping)
            for field in fields(type(value))
            if field.init
        },
    )


@resolve_addresses.register
def resolve_addresses_address(value: Address, mapping) -> Any:
    """See `resolve_addresses`."""
    try:
        resolved = mapping[value]

    except KeyError as exc:
        raise UnresolvableAddress(value) from exc

    if value.attr is None:
        return resolved

    return operator.attrgetter(value.attr)(resolved)


@resolve_addresses.register
def resolve_addresses_dict(value: dict, mapping) -> dict:
    """See `resolve_addresses`."""
    return {key: resolve_addresses(nested_value, mapping) for key, nested_value in value.items()}


@resolve_addresses.register
def resolve_addresses_list(value: list, mapping) -> list:
    """See `resolve_addresses`."""
    return [resolve_addresses(nested_value, mapping) for nested_value in value]


@resolve_addresses.register
def resolve_addresses_tuple(value: tuple, mapping) -> tuple:
    """See `resolve_addresses`."""
    return tuple(resolve_addresses(nested_value, mapping) for nested_value in value)


@resolve_addresses.register
def resolve_addresses_set(value: set, mapping) -> set:
    """See `resolve_addresses`."""
    return {resolve_addresses(nested_value, mapping) for nested_value in value}


_DUMMY = object()


class _ResultPlaceholder:
    def __getattr__(self, name):
        return _DUMMY


_RESULT_PLACEHOLDER = _ResultPlaceholder()


class UnknownAddresses(Exception):
    """Raised when a step refers to steps that are not defined before it.

    Arguments:
        addresses: unknown addresses used in the pipeline.
    """

    def __init__(self, addresses: List[Address]) -> None:
        super().__init__(addresses)

        self.addresses = addresses

    def __str__(self):
        addresses_str = ", ".join(str(addr) for addr in self.addresses)
        return f"cannot find addresses: {addresses_str}"


def generate_plan(pipeline: "Pipeline") -> Plan:
    """Generates a new plan running every step of the pipeline in order.

    Arguments:
        pipeline: the pipeline defined for the project.

    Returns:
        The plan with all the actions to deploy the current revision.

    Raises:
        UnknownAddresses: if a step depends on a step not defined before it.
    """
    actions = []
    results: Dict[Address, Any] = {}
    unresolvable_addresses: List[Address] = []

    for step_addr in pipeline.steps():
        try:
            resolve_addresses(pipeline.dependencies(step_addr), results)

        except UnresolvableAddress as exc:
            unresolvable_addresses.append(exc.address)

        actions.append(
            Action(
                type=ActionType.RUN,
                address=step_addr,
                state=ActionState.PLANNED,
            )
        )

        results[step_addr] = _RESULT_PLACEHOLDER

    if unresolvable_addresses:
        raise UnknownAddresses(addresses=unresolvable_addresses)

    return Plan(
        actions=actions,
    )


def rollback_plan(plan: Plan) -> Plan:
    """Generates the plan reverting all the steps completed in a previous
    plan, in reverse order.

    Arguments:
        plan: a plan that has been executed.

    Returns:
        A plan made only of rollback actions.
    """
    actions = [
        Action(
            type=ActionType.ROLLBACK,
            address=action.address,
            state=ActionState.PLANNED,
            snapshot=action.snapshot,
        )
        for action in reversed(plan.actions)
        if action.type is ActionType.RUN and action.state is ActionState.DONE
    ]

    return Plan(actions=actions)
