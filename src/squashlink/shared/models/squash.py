"""SquashTM API Response Models.

Pydantic models for the HAL resources returned by the SquashTM REST API.
They live in shared so the tree loader in core can use them without
importing from the services layer.

Unknown fields (``_links``, bugtracker bindings, custom fields...) are
ignored; wire names are camelCase and mapped through aliases.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from squashlink.shared.constants import HalKeys


class SquashModel(BaseModel):
    """Common configuration for SquashTM resources."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class Importance(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    VERY_HIGH = "VERY_HIGH"


class TestCaseStatus(str, Enum):
    __test__ = False

    WORK_IN_PROGRESS = "WORK_IN_PROGRESS"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    OBSOLETE = "OBSOLETE"


class NamedRef(SquashModel):
    """Reference to another resource by id and name."""

    id: int
    name: str | None = None


class CodeLabel(SquashModel):
    """Info-list item such as a test case nature or type."""

    code: str
    label: str | None = None


class AuditStamp(SquashModel):
    by: str | None = None
    on: str | None = None


class Project(SquashModel):
    id: int
    name: str
    label: str | None = None
    description: str | None = None
    active: bool = True
    template: bool = False


class Folder(SquashModel):
    id: int
    name: str
    description: str | None = None
    path: str | None = None
    project: NamedRef | None = None
    parent: NamedRef | None = None
    created: AuditStamp | None = None
    last_modified: AuditStamp | None = Field(default=None, alias="lastModified")


class TestStep(SquashModel):
    __test__ = False

    id: int
    action: str = ""
    expected_result: str = Field(default="", alias="expectedResult")
    index: int = 0


class TestCase(SquashModel):
    """A SquashTM test case.

    Listing calls request a projection, so everything except id and name
    may be absent. Steps are kept ordered by their index.
    """

    __test__ = False

    id: int
    name: str
    reference: str | None = None
    description: str | None = None
    prerequisite: str | None = None
    importance: Importance | None = None
    nature: CodeLabel | None = None
    type: CodeLabel | None = None
    status: TestCaseStatus | None = None
    project: NamedRef | None = None
    folder: NamedRef | None = None
    created: AuditStamp | None = None
    last_modified: AuditStamp | None = Field(default=None, alias="lastModified")
    steps: tuple[TestStep, ...] = ()

    @field_validator("steps", mode="after")
    @classmethod
    def _order_steps(cls, steps: tuple[TestStep, ...]) -> tuple[TestStep, ...]:
        return tuple(sorted(steps, key=lambda step: step.index))

    @property
    def folder_name(self) -> str:
        if self.folder is not None and self.folder.name:
            return self.folder.name
        return "Unknown"


class PageInfo(SquashModel):
    """Pagination block of a HAL collection response."""

    size: int
    total_elements: int = Field(alias="totalElements")
    total_pages: int = Field(alias="totalPages")
    number: int


ItemT = TypeVar("ItemT", bound=SquashModel)


class HalCollection(SquashModel, Generic[ItemT]):
    """Items of one ``_embedded`` collection plus its optional page block."""

    items: list[ItemT] = Field(default_factory=list)
    page: PageInfo | None = None

    @classmethod
    def from_payload(
        cls,
        payload: dict[str, Any],
        key: str,
        item_model: type[ItemT],
    ) -> HalCollection[ItemT]:
        """Extract ``payload["_embedded"][key]`` as a list of item_model.

        A missing ``_embedded`` block or key yields an empty collection.

        Raises:
            ValueError: If the collection or an item has the wrong shape
                (pydantic.ValidationError is a ValueError)
        """
        embedded = payload.get(HalKeys.EMBEDDED) or {}
        if not isinstance(embedded, dict):
            msg = f"'{HalKeys.EMBEDDED}' must be an object"
            raise ValueError(msg)

        raw_items = embedded.get(key) or []
        if not isinstance(raw_items, list):
            msg = f"'{HalKeys.EMBEDDED}.{key}' must be a list"
            raise ValueError(msg)

        raw_page = payload.get(HalKeys.PAGE)
        return HalCollection[item_model](  # type: ignore[valid-type]
            items=[item_model.model_validate(item) for item in raw_items],
            page=PageInfo.model_validate(raw_page) if raw_page else None,
        )


__all__ = [
    "AuditStamp",
    "CodeLabel",
    "Folder",
    "HalCollection",
    "Importance",
    "NamedRef",
    "PageInfo",
    "Project",
    "SquashModel",
    "TestCase",
    "TestCaseStatus",
    "TestStep",
]
