from testfixtures import ShouldRaise, compare

from ecsdeploy.core.config import DEFAULT_PLUGINS, AwsConfig, Config, ProjectConfig, StateConfig
from ecsdeploy.core.context import load_context
from ecsdeploy.core.plugin import Plugin, load_plugin
from ecsdeploy.plugins.git.steps import GitCheckout


def _config(plugins=None) -> Config:
    return Config(
        state=StateConfig(repo_path="state"),
        project=ProjectConfig(repo_path="proj"),
        aws=AwsConfig(region="eu-central-1"),
        plugins=DEFAULT_PLUGINS if plugins is None else plugins,
    )


def test_load_plugin__loads_steps_from_register_module():
    plugin = load_plugin("ecsdeploy.plugins.git")

    compare(plugin, Plugin(namespace="git", steps=[GitCheckout]))


def test_load_context__registers_all_builtin_step_types():
    ctx = load_context(_config(), revision="abc")

    compare(ctx.revision, "abc")
    compare(
        sorted(ctx.specs),
        [
            "aws_configure_credentials",
            "aws_ecr_login",
            "aws_ecs_deploy_task_definition",
            "aws_ecs_download_task_definition",
            "aws_ecs_render_task_definition",
            "docker_build_push",
            "git_checkout",
        ],
    )
    compare(ctx.clients.bound, False)


def test_load_context__raises_ValueError_on_duplicated_step_type():
    with ShouldRaise(ValueError("step type git_checkout is already registered")):
        load_context(_config(["ecsdeploy.plugins.git", "ecsdeploy.plugins.git"]), revision="abc")


def test_Context__work_dir_is_scoped_to_the_revision():
    ctx = load_context(_config([]), revision="abc")

    compare(str(ctx.work_dir), "proj/.ecsdeploy/abc")

