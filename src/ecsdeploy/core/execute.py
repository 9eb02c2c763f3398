"""Rules for executing a deployment plan."""
import inspect
from typing import Any, Dict, Iterable, List

from attrs import evolve
from cattrs import structure, unstructure

from ecsdeploy.core.address import Address
from ecsdeploy.core.pipeline import Pipeline
from ecsdeploy.core.plan import Action, ActionState, ActionType, Plan, resolve_addresses
from ecsdeploy.core.step import Step
from ecsdeploy.utils import error, print_waiting, rollback, success


class PipelineFailed(Exception):
    """Raised when an action of the plan failed, halting the pipeline.

    Arguments:
        address: the address of the failed step.
        action_type: the operation that failed.
    """

    def __init__(self, address: Address, action_type: ActionType) -> None:
        super().__init__(address, action_type)

        self.address = address
        self.action_type = action_type

    def __str__(self):
        return f"{self.action_type.value.lower()} of step {self.address} failed: {self.__cause__}"


def describe_error(exc: BaseException) -> Dict[str, Any]:
    """Converts an exception into the error stored in a failed action."""
    return {"type": type(exc).__name__, "message": str(exc)}


def _get_step(pipeline: Pipeline, address: Address) -> Step:
    step = pipeline.steps().get(address)
    if step is None:
        raise ValueError(f"step {address} does not exist")

    return step


def _prepare_run(pipeline: Pipeline, address: Address, results: Dict[Address, Any]) -> Step:
    step = _get_step(pipeline, address)
    dep_results = resolve_addresses(pipeline.dependencies(address), results)

    return evolve(step, **dep_results)


def _decode_snapshot(step: Step, snapshot: Any) -> Any:
    if snapshot is None:
        return None

    return structure(snapshot, inspect.signature(step.snapshot).return_annotation)


def _replace(plan: Plan, idx: int, action: Action) -> Plan:
    actions = list(plan.actions)
    actions[idx] = action

    return evolve(plan, actions=actions)


def _halt(plan: Plan, idx: int, exc: Exception) -> Plan:
    actions: List[Action] = list(plan.actions)
    actions[idx] = evolve(actions[idx], state=ActionState.FAILED, error=describe_error(exc))

    for following_idx in range(idx + 1, len(actions)):
        if actions[following_idx].state is ActionState.PLANNED:
            actions[following_idx] = evolve(actions[following_idx], state=ActionState.CANCELLED)

    return evolve(plan, actions=actions)


def _perform_run(pipeline: Pipeline, address: Address, step: Step, snapshot: Any) -> Any:
    with print_waiting(f"step {address}"):
        res = step.run(pipeline.ctx(), snapshot)
        success(f"step completed address={address}")

    return res


def _perform_rollback(pipeline: Pipeline, address: Address, snapshot: Any):
    step = _get_step(pipeline, address)
    decoded_snapshot = _decode_snapshot(step, snapshot)

    with print_waiting(f"rollback {address}"):
        step.rollback(pipeline.ctx(), decoded_snapshot)
        rollback(f"rolled back address={address}")


def execute_plan(pipeline: Pipeline, plan: Plan) -> Iterable[Plan]:
    """Executes a plan performing each action sequentially and yielding a new
    version of the plan for each state change.

    Run actions pass their result to the steps referencing them. Rollback
    actions only rely on the step parameters and the stored snapshot.

    When an action fails, the action is marked as failed, all the following
    actions are cancelled and, after yielding the final plan, `PipelineFailed`
    is raised. Nothing is retried or rolled back automatically.

    Arguments:
        pipeline: the pipeline the plan was generated from.
        plan: the plan to execute.

    Yields:
        A new state of the plan after each action state change.

    Raises:
        PipelineFailed: if any action failed.
    """
    results: Dict[Address, Any] = {}

    for idx, action in enumerate(plan.actions):
        if action.state is not ActionState.PLANNED:
            continue

        try:
            match action.type:
                case ActionType.RUN:
                    step = _prepare_run(pipeline, action.address, results)
                    snapshot = step.snapshot(pipeline.ctx())

                    plan = _replace(
                        plan,
                        idx,
                        evolve(action, state=ActionState.IN_PROGRESS, snapshot=unstructure(snapshot)),
                    )
                    yield plan

                    res = _perform_run(pipeline, action.address, step, snapshot)
                    results[action.address] = res

                    plan = _replace(
                        plan,
                        idx,
                        evolve(plan.actions[idx], state=ActionState.DONE, result=unstructure(res)),
                    )

                case ActionType.ROLLBACK:
                    plan = _replace(plan, idx, evolve(action, state=ActionState.IN_PROGRESS))
                    yield plan

                    _perform_rollback(pipeline, action.address, action.snapshot)

                    plan = _replace(plan, idx, evolve(plan.actions[idx], state=ActionState.DONE))

                case _:
                    raise ValueError(f"unexpected action type {action.type}")

        except Exception as exc:  # pylint: disable=broad-except
            error(f"{action.type.value.lower()} failed address={action.address}")
            plan = _halt(plan, idx, exc)
            yield plan

            raise PipelineFailed(action.address, action.type) from exc

        yield plan
