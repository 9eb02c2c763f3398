"""Main entrypoint for the `ecsdeploy` command."""
import json
import os
from typing import Callable, Optional

import click
from attrs import evolve
from rich.markup import escape
from rich.table import Table

from ecsdeploy.core.clients import AccountMismatch, MissingSecret, create_session, verify_session
from ecsdeploy.core.config import load_config
from ecsdeploy.core.context import Context, load_context
from ecsdeploy.core.execute import PipelineFailed, execute_plan
from ecsdeploy.core.git import get_current_branch, get_current_commit
from ecsdeploy.core.pipeline import Pipeline, UnknownStepType, prepare_pipeline
from ecsdeploy.core.plan import ActionState, Plan, UnknownAddresses, generate_plan, rollback_plan
from ecsdeploy.core.state import Revision, init_revision, init_state, load_revision, save_revision
from ecsdeploy.plugins.aws.ecs.render import (
    ContainerNotFound,
    read_task_definition,
    render_task_definition,
)
from ecsdeploy.plugins.docker.recipe import render_recipe
from ecsdeploy.utils import CONSOLE, error, log, print_info, print_waiting

# commands that do not need a project configuration.
OFFLINE_COMMANDS = ("render",)


@click.group()
@click.option("-c", "--config", "config_path", default="./ecsdeploy.toml")
@click.option("-r", "--revision", default=None)
@click.option("--cwd", default=None)
@click.pass_context
def cli(ctx: click.Context, config_path: str, revision: Optional[str], cwd: Optional[str]):
    """Entrypoint for the ecsdeploy command."""
    if cwd is not None:
        os.chdir(cwd)

    if ctx.invoked_subcommand in OFFLINE_COMMANDS:
        return

    config = load_config(path=config_path)
    revision = revision or get_current_commit(path=config.project.repo_path)

    ctx.obj = load_context(config=config, revision=revision)


def _prepare_pipeline(ctx: Context) -> Pipeline:
    try:
        return prepare_pipeline(ctx=ctx)

    except (UnknownStepType, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc


def _generate_plan(pipeline: Pipeline) -> Plan:
    try:
        return generate_plan(pipeline)

    except UnknownAddresses as exc:
        raise click.ClickException(str(exc)) from exc


def _execute(
    ctx: Context,
    pipeline: Pipeline,
    plan: Plan,
    make_revision: Callable[[Plan], Revision],
):
    try:
        with print_waiting("executing plan"):
            for curr_plan in execute_plan(pipeline, plan):  # pylint: disable=not-an-iterable
                save_revision(ctx=ctx, revision=make_revision(curr_plan))

    except PipelineFailed as exc:
        error(str(exc))
        raise click.ClickException(f"revision {ctx.revision} not deployed") from exc


@cli.command()
@click.option("-f", "--force", is_flag=True, default=False)
@click.option("--any-branch", is_flag=True, default=False)
@click.pass_obj
def apply(ctx: Context, force: bool, any_branch: bool):
    """Run the deploy pipeline for the current revision."""
    branch = get_current_branch(path=ctx.config.project.repo_path)

    if not any_branch and branch != ctx.config.trigger.branch:
        print_info(
            f"branch {branch or '(detached HEAD)'} does not trigger deploys "
            f"(trigger branch is {ctx.config.trigger.branch}), skipping"
        )
        return

    log("initializing project state")
    init_state(ctx=ctx)

    log("preparing pipeline")
    pipeline = _prepare_pipeline(ctx)

    log("initializing revision state")
    init_revision(ctx=ctx)

    log("loading revision state")
    revision = load_revision(ctx=ctx)

    if revision is not None and revision.deployed and not force:
        print_info(f"revision {ctx.revision} is already deployed, use --force to deploy it again")
        return

    strategy_plan = _generate_plan(pipeline)

    _execute(ctx, pipeline, strategy_plan, lambda plan: Revision(plan=plan))


@cli.command()
@click.pass_obj
def rollback(ctx: Context):
    """Roll back the completed steps of the current revision."""
    revision = load_revision(ctx=ctx)

    if revision is None:
        raise click.ClickException(f"revision {ctx.revision} has never been deployed")

    pipeline = _prepare_pipeline(ctx)
    strategy_plan = rollback_plan(revision.plan)

    if not strategy_plan.actions:
        print_info("nothing to roll back")
        return

    try:
        session = create_session(ctx.config.aws)
        verify_session(ctx.config.aws, session)

    except (MissingSecret, AccountMismatch) as exc:
        raise click.ClickException(str(exc)) from exc

    ctx.clients.bind(session)

    _execute(ctx, pipeline, strategy_plan, lambda plan: evolve(revision, rollback=plan))


def _plan_table(title: str, strategy_plan: Plan) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Type", justify="right")
    table.add_column("Address")
    table.add_column("State", justify="right")
    table.add_column("Result", justify="right")
    table.add_column("Error", justify="right")

    for idx, action in enumerate(strategy_plan.actions):
        row = [str(idx), action.type.name, str(action.address)]

        match action.state:
            case ActionState.PLANNED:
                state = "planned"

            case ActionState.IN_PROGRESS:
                state = "[cyan] in progress"

            case ActionState.FAILED:
                state = "[red] failed"

            case ActionState.DONE:
                state = "[green] done"

            case ActionState.CANCELLED:
                state = "[dim] cancelled"

            case _:
                raise ValueError(f"unknown state {action.state}")

        row.append(state)
        row.append("" if action.result is None else escape(str(action.result)))
        row.append("" if action.error is None else escape(action.error.get("message", "")))

        table.add_row(*row)

    return table


@cli.command()
@click.option("-f", "--force", is_flag=True, default=False)
@click.pass_obj
def plan(ctx: Context, force: bool):
    """Shows the plan for the current revision without executing it."""
    pipeline = _prepare_pipeline(ctx)

    revision = None if force else load_revision(ctx=ctx)

    if revision is None:
        CONSOLE.print(_plan_table("Plan", _generate_plan(pipeline)))
        return

    CONSOLE.print(_plan_table("Plan", revision.plan))

    if revision.rollback is not None:
        CONSOLE.print(_plan_table("Rollback", revision.rollback))


@cli.command()
@click.argument("task_definition", type=click.Path(exists=True, dir_okay=False))
@click.option("--container", "container_name", required=True)
@click.option("--image", required=True)
@click.option("-o", "--output", type=click.File("w"), default="-")
def render(task_definition: str, container_name: str, image: str, output):
    """Fill in a new image in a task definition file."""
    document = read_task_definition(task_definition)

    try:
        rendered = render_task_definition(document, container_name, image)

    except ContainerNotFound as exc:
        raise click.ClickException(str(exc)) from exc

    output.write(json.dumps(rendered, indent=2, sort_keys=True))
    output.write("\n")


@cli.command()
@click.option("-o", "--output", type=click.File("w"), default="Dockerfile")
@click.pass_obj
def recipe(ctx: Context, output):
    """Write the configured container recipe as a Dockerfile."""
    if ctx.config.recipe is None:
        raise click.ClickException("no [recipe] configured")

    output.write(render_recipe(ctx.config.recipe))


if __name__ == "__main__":
    cli()  # pylint: disable=no-value-for-parameter
