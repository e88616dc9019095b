"""Object metadata and group/version identifiers shared by the API types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

__all__ = [
    "TypeMeta",
    "ObjectMeta",
    "ListMeta",
    "OwnerReference",
    "GroupVersion",
    "GroupResource",
]


@dataclass
class TypeMeta:
    """The kind and API version of a serialized object."""

    kind: str = ""
    api_version: str = ""


@dataclass
class OwnerReference:
    """A reference to an object that owns another object."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = None


@dataclass
class ObjectMeta:
    """Identifying metadata of a stored object."""

    name: str = ""
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)


@dataclass
class ListMeta:
    """Metadata of a list of objects."""

    resource_version: str = ""
    continue_token: str = ""


@dataclass(frozen=True)
class GroupResource:
    """A resource name qualified by its API group."""

    group: str
    resource: str

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    def with_resource(self, resource: str) -> GroupResource:
        """Return the group-qualified name of ``resource``."""
        return GroupResource(self.group, resource)

    def __str__(self) -> str:
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"