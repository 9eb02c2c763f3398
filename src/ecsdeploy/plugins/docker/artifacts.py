"""Artifacts used to represent Docker images."""
from typing import Optional

from attrs import define


@define(frozen=True, kw_only=True)
class ImageReference:
    """An image pushed to a registry.

    Arguments:
        registry: the registry host.
        repository: the repository path within the registry.
        tag: the image tag, derived from the revision.
        digest: the image digest reported by the registry, if known.
    """

    registry: str
    repository: str
    tag: str
    digest: Optional[str] = None

    @property
    def uri(self) -> str:
        """The image reference `{registry}/{repository}:{tag}`."""
        return f"{self.registry}/{self.repository}:{self.tag}"
