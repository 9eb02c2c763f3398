"""Helpers for building and pushing Docker images."""
import json
from typing import Optional


class PushFailed(Exception):
    """Raised when the registry rejected an image push."""


def full_tag(image_name: str, tag_prefix: str, revision: str) -> str:
    """Creates the image full tag (image name + tag) for a specific revision.

    Argument:
        image_name: the image's name (i.e. `123456789012.dkr.ecr.eu-central-1.amazonaws.com/df1/static-www`)
        tag_prefix: string prepended to the tag (i.e. `rev-`).
        revision: the revision identifier.

    Returns:
        The full image tag (i.e. `123456789012.dkr.ecr.eu-central-1.amazonaws.com/df1/static-www:rev-abc`)
    """
    return f"{image_name}:{tag_prefix}{revision}"


def check_push_result(output: str) -> Optional[str]:
    """Checks the output of a push for errors.

    Arguments:
        output: the JSON lines returned by the Docker daemon.

    Returns:
        The digest of the pushed image, if reported by the daemon.

    Raises:
        PushFailed: if the daemon reported an error.
    """
    digest = None

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        data = json.loads(line)

        if "error" in data:
            raise PushFailed(data["error"])

        digest = data.get("aux", {}).get("Digest", digest)

    return digest
