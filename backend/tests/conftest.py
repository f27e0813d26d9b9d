"""Shared fixtures for the taxonomy and workspace tests."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from clipflow.core.repositories.implementations.memory.blob_store import InMemoryBlobStore
from clipflow.core.repositories.workspace_repository import WorkspaceRepository
from clipflow.core.services.workspace_service import Workspace
from clipflow.core.taxonomy.tree import TagTree


def _check_tree(tree: TagTree) -> None:
    # Index and a fresh walk agree
    assert tree.index.keys() == tree.reachable_ids()

    levels: list[str | None] = [None, *tree.index.keys()]
    for parent_id in levels:
        children = tree.roots if parent_id is None else tree.get_node(parent_id).children
        names = [tree.get_node(child_id).name for child_id in children]
        assert len(names) == len(set(names)), f"duplicate sibling names under {parent_id}"
        assert sorted(tree.ordering.order_of(parent_id)) == sorted(children)
        for child_id in children:
            assert tree.get_node(child_id).parent_id == parent_id


@pytest.fixture
def check_tree():
    return _check_tree


@pytest.fixture
def store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def repository(store: InMemoryBlobStore) -> WorkspaceRepository:
    return WorkspaceRepository(store)


@pytest.fixture
def workspace(repository: WorkspaceRepository) -> Workspace:
    return Workspace.open("test", repository)


@pytest.fixture
def scene(workspace: Workspace) -> SimpleNamespace:
    """Scene > (Cafe, School) with one note on each child."""
    scene_id = workspace.create_tag("Scene").value
    cafe_id = workspace.create_tag("Cafe", scene_id).value
    school_id = workspace.create_tag("School", scene_id).value
    i1 = workspace.add_note("Latte art", [cafe_id]).value
    i2 = workspace.add_note("Homework", [school_id]).value
    return SimpleNamespace(ws=workspace, scene=scene_id, cafe=cafe_id, school=school_id, i1=i1, i2=i2)
