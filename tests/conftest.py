"""Shared fixtures: sample PlantUML documents and position snapshots."""

import pytest

from layout_sync import Entity, SyncConfig


@pytest.fixture
def class_doc() -> str:
    return """\
@startuml
skinparam monochrome true
' core domain
class A
class B
class C
A --> B : uses
B ..> C
@enduml
"""


@pytest.fixture
def abc_entities() -> list:
    return [Entity("A", "A", "class"), Entity("B", "B", "class"), Entity("C", "C", "class")]


@pytest.fixture
def triangle_positions() -> dict:
    # B right of A, C below both
    return {"A": (0, 0), "B": (300, 0), "C": (150, 300)}


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig()
