"""All the steps provided by the Docker plugin."""
from pathlib import Path
from typing import Optional

from attrs import define

from ecsdeploy.core.context import Context
from ecsdeploy.core.step import Step
from ecsdeploy.plugins.aws.ecr.artifacts import Registry, image_exists
from ecsdeploy.plugins.docker.artifacts import ImageReference
from ecsdeploy.plugins.docker.recipe import render_recipe
from ecsdeploy.plugins.docker.utils import check_push_result, full_tag
from ecsdeploy.plugins.git.artifacts import SourceTree
from ecsdeploy.utils import log, print_waiting


@define(frozen=True, kw_only=True)
class DockerBuildPush(Step):
    """Builds the image of the revision and pushes it to the registry.

    The image is tagged `{registry}/{repository}:{tag_prefix}{revision}`.
    Tags are immutable: if the tag already exists in the repository, the
    build and the push are skipped.

    Arguments:
        registry: the registry the Docker client is logged in to.
        repository: the repository path within the registry.
        source: the source tree to build from. Defaults to the project repository.
        context: build context, relative to the source tree.
        dockerfile: Dockerfile path, relative to the build context.
        tag_prefix: string prepended to the revision in the tag.
        render_recipe: write the `[recipe]` configuration to the Dockerfile
            before building.
        skip_existing: skip the build if the tag has already been pushed.

    Returns:
        The reference of the pushed image.
    """

    registry: Registry
    repository: str
    source: Optional[SourceTree] = None
    context: str = "."
    dockerfile: str = "Dockerfile"
    tag_prefix: str = ""
    render_recipe: bool = False
    skip_existing: bool = True

    @classmethod
    def spec_name(cls) -> str:
        return "docker_build_push"

    def snapshot(self, ctx: Context) -> None:
        return None

    def run(self, ctx: Context, snapshot: None) -> ImageReference:
        image_name = f"{self.registry.host}/{self.repository}"
        tag = f"{self.tag_prefix}{ctx.revision}"
        dest_tag = full_tag(image_name, self.tag_prefix, ctx.revision)

        if self.skip_existing and image_exists(ctx.clients.aws("ecr"), self.repository, tag):
            log(f"docker image {dest_tag} already exists, skipping build")

            return ImageReference(registry=self.registry.host, repository=self.repository, tag=tag)

        base = Path(self.source.path if self.source is not None else ctx.config.project.repo_path)
        build_path = base.joinpath(self.context)

        if self.render_recipe:
            self._write_recipe(ctx, build_path)

        client = ctx.clients.docker()

        with print_waiting("building docker image"):
            client.images.build(
                path=str(build_path),
                dockerfile=self.dockerfile,
                tag=dest_tag,
                rm=True,
            )
            log(f"built docker image {dest_tag}")

        with print_waiting("pushing docker image"):
            res = client.images.push(image_name, tag=tag)
            digest = check_push_result(res)
            log(f"pushed docker image {dest_tag}")

        return ImageReference(
            registry=self.registry.host,
            repository=self.repository,
            tag=tag,
            digest=digest,
        )

    def _write_recipe(self, ctx: Context, build_path: Path):
        if ctx.config.recipe is None:
            raise ValueError("render_recipe is set but no [recipe] is configured")

        dockerfile_path = build_path.joinpath(self.dockerfile)
        with open(dockerfile_path, "w", encoding="utf-8") as dockerfile:
            dockerfile.write(render_recipe(ctx.config.recipe))

        log(f"rendered container recipe to {dockerfile_path}")

    def rollback(self, ctx: Context, snapshot: None):
        pass
