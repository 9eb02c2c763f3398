from unittest import mock

import pytest
from dulwich import porcelain

from ecsdeploy.core.clients import Clients
from ecsdeploy.core.config import AwsConfig, Config, ProjectConfig, RecipeConfig, StateConfig
from ecsdeploy.core.context import Context

AUTHOR = b"Jane Doe <jane@example.com>"


def _commit_file(repo_path, filename: str, content: str) -> str:
    path = repo_path / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)

    porcelain.add(str(repo_path), paths=[str(path)])
    sha = porcelain.commit(
        str(repo_path),
        message=f"add {filename}".encode("utf-8"),
        author=AUTHOR,
        committer=AUTHOR,
    )

    return sha.decode("utf-8")


@pytest.fixture
def commit_file():
    return _commit_file


@pytest.fixture
def git_repo(tmp_path_factory):
    path = tmp_path_factory.mktemp("repo")

    repo = porcelain.init(str(path))
    repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

    _commit_file(path, "src/index.html", "<p>Hello, World!</p>")

    return path


@pytest.fixture
def aws_clients():
    return {
        "ecr": mock.MagicMock(),
        "ecs": mock.MagicMock(),
        "sts": mock.MagicMock(),
    }


@pytest.fixture
def docker_client():
    return mock.MagicMock()


@pytest.fixture
def ecsdeploy_context(tmp_path_factory, aws_clients, docker_client) -> Context:
    state_path = tmp_path_factory.mktemp("state")
    proj_path = tmp_path_factory.mktemp("proj")

    config = Config(
        state=StateConfig(repo_path=str(state_path)),
        project=ProjectConfig(repo_path=str(proj_path)),
        aws=AwsConfig(region="eu-central-1"),
        recipe=RecipeConfig(),
    )

    session = mock.MagicMock()
    session.client.side_effect = lambda name: aws_clients[name]
    session.region_name = "eu-central-1"

    return Context(
        config=config,
        revision="abc",
        clients=Clients(session=session, docker_client=docker_client),
    )
