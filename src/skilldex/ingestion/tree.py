"""Helpers for walking resource trees."""

import json

from skilldex.models.resource import FlatResource, ResourceNode


def build_content(node: ResourceNode, depth: int = 0) -> str:
    """
    Content of a node and its whole subtree.

    Nodes without parsed content are rendered from their name, description
    and remaining metadata.
    """
    if node.metadata.content:
        content = node.metadata.content
    else:
        content = f"{'#' * min(depth + 1, 6)} {node.name}\n\n"
        if node.metadata.description:
            content += f"{node.metadata.description}\n\n"

        extra = node.metadata.model_dump(
            exclude={"content", "description", "extra"}, exclude_none=True
        )
        extra.update(node.metadata.extra)
        if extra:
            content += "---\n"
            for key, value in extra.items():
                content += f"{key}: {json.dumps(value, default=str)}\n"
            content += "---\n\n"

        for child in node.children:
            content += "\n\n" + build_content(child, depth + 1)

    return content.strip()


def flatten_resources(nodes: list[ResourceNode]) -> list[FlatResource]:
    """Every node exactly once, each parent before its descendants."""
    flat: list[FlatResource] = []

    def visit(node: ResourceNode, depth: int):
        flat.append(
            FlatResource(
                id=node.id,
                name=node.name,
                path=node.path,
                content=build_content(node, depth),
                description=node.metadata.description,
                child_count=len(node.children),
                metadata=node.metadata,
            )
        )
        for child in node.children:
            visit(child, depth + 1)

    for node in nodes:
        visit(node, 0)
    return flat
