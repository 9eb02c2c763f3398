"""Artifacts representing ECR registries and images."""
from attrs import define
from botocore.exceptions import ClientError


@define(frozen=True, kw_only=True)
class Registry:
    """A registry the Docker client is logged in to.

    Arguments:
        host: the registry host (i.e. `123456789012.dkr.ecr.eu-central-1.amazonaws.com`).
        username: the user used to log in.
    """

    host: str
    username: str


def image_exists(ecr, repository: str, tag: str) -> bool:
    """Checks if an image tag has already been pushed to a repository.

    Arguments:
        ecr: the ECR client.
        repository: the repository name (i.e. `df1/static-www`).
        tag: the image tag.
    """
    try:
        res = ecr.describe_images(repositoryName=repository, imageIds=[{"imageTag": tag}])

    except ClientError as exc:
        if exc.response["Error"]["Code"] == "ImageNotFoundException":
            return False

        raise

    return bool(res["imageDetails"])
