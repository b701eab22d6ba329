"""Shared data models."""

from .squash import (
    AuditStamp,
    CodeLabel,
    Folder,
    HalCollection,
    Importance,
    NamedRef,
    PageInfo,
    Project,
    TestCase,
    TestCaseStatus,
    TestStep,
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
    "TestCase",
    "TestCaseStatus",
    "TestStep",
]
