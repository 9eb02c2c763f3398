"""Renders the declarative container recipe into a Dockerfile."""
import json

from ecsdeploy.core.config import RecipeConfig


def render_recipe(recipe: RecipeConfig) -> str:
    """Renders the recipe: a base image, a single directory copy, an exposed
    port and a foreground command in exec form.

    Arguments:
        recipe: the recipe to render.

    Returns:
        The content of the Dockerfile.
    """
    return "\n".join(
        [
            f"FROM {recipe.base_image}",
            f"COPY {recipe.source} {recipe.destination}",
            f"EXPOSE {recipe.port}",
            f"CMD {json.dumps(recipe.command)}",
            "",
        ]
    )
