"""Common interface for nukable AWS resources and shared logging."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger("cloud-nuke")

AWS_RESOURCE_EXCLUSION_TAG_KEY = "cloud-nuke-excluded"


class AwsResources(ABC):
    """A collection of resources of one kind that can be deleted in batches."""

    resource_name: str = ""
    max_batch_size: int = 200

    @property
    @abstractmethod
    def resource_identifiers(self) -> list[str]:
        """Identifiers of the resources found."""

    @abstractmethod
    def nuke(self, session: Any, identifiers: list[str]) -> None:
        """Delete the resources with the given identifiers."""


@dataclass
class AwsRegionResource:
    """All resource collections found in one region."""

    resources: list[AwsResources] = field(default_factory=list)


@dataclass
class AwsAccountResources:
    """Resource collections keyed by region."""

    resources: dict[str, AwsRegionResource] = field(default_factory=dict)


def aws_error_code(error: BaseException) -> str | None:
    """Return the AWS error code carried by an exception, if there is one."""
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code = response.get("Error", {}).get("Code")
        if code is not None:
            return str(code)
    code = getattr(error, "code", None)
    return str(code) if code is not None else None