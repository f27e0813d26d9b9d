from __future__ import annotations

from typing import TYPE_CHECKING

from clipflow.core.schemas.taxonomy import TagTaxonomy, TaxonomyNode
from clipflow.utils.logging import get_logger

if TYPE_CHECKING:
    from clipflow.core.models.tag import TagNode
    from clipflow.core.services.workspace_service import Workspace
    from clipflow.core.taxonomy.tree import TagTree


logger = get_logger(__name__)


def _to_view(tree: TagTree, node: TagNode) -> TaxonomyNode:
    return TaxonomyNode(
        id=node.id,
        name=node.name,
        full_name=tree.get_full_name(node.id),
        children=[_to_view(tree, child) for child in tree.get_children(node.id)],
    )


def build_workspace_taxonomy(workspace: Workspace) -> TagTaxonomy:
    """Nested, order-respecting view of a workspace's tag tree."""
    tree = workspace.tree
    tags = [_to_view(tree, root) for root in tree.list_roots()]
    logger.debug("Built taxonomy for workspace %s with %d tag(s)", workspace.workspace_id, len(tree))
    return TagTaxonomy(workspace_id=workspace.workspace_id, tags=tags, tag_count=len(tree))
