from __future__ import annotations

from pydantic import Field

from clipflow.core.models.base import AppBaseModel


class TaxonomyNode(AppBaseModel):
    """One tag with its children, in display order."""

    id: str
    name: str
    full_name: str
    children: list[TaxonomyNode] = Field(default_factory=list)


class TagTaxonomy(AppBaseModel):
    """The whole tag tree of a workspace.

    - tags: top-level tags, each nesting its descendants
    - tag_count: number of tags at every depth
    """

    workspace_id: str
    tags: list[TaxonomyNode] = Field(default_factory=list)
    tag_count: int = 0
