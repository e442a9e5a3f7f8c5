"""Markdown format adapter: whole documents or heading trees."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

import structlog
import yaml

from skilldex.ingestion.formats.base import ContentFormat
from skilldex.models.resource import RawContent, ResourceMetadata, ResourceNode
from skilldex.utils.text import slugify

logger = structlog.get_logger()

FRONT_MATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
TITLE_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)
FIRST_PARAGRAPH_PATTERN = re.compile(r"^(?:#[^\n]*\n+)?([^#\n][^\n]+)", re.MULTILINE)
FIRST_SENTENCE_PATTERN = re.compile(r"^[^.!?]+[.!?]")

RouteType = Literal["resource", "instruction"]


@dataclass
class FrontMatter:
    description: str | None = None
    unlocks: list[str] | None = None
    extra: dict = field(default_factory=dict)


@dataclass
class _Heading:
    level: int
    text: str
    slug: str
    children: list["_Heading"] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)


def parse_front_matter(markdown: str) -> tuple[FrontMatter | None, str]:
    """
    Split a leading YAML block from the body.

    A doubled opening delimiter ("---\\n---\\n") is collapsed first; some
    exporters emit an empty block before the real one.
    """
    if markdown.startswith("---\n---\n"):
        markdown = markdown[4:]

    match = FRONT_MATTER_PATTERN.match(markdown)
    if not match:
        return None, markdown

    body = markdown[match.end():]
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning("front_matter_invalid", error=str(e))
        return FrontMatter(), body

    if not isinstance(data, dict):
        return FrontMatter(), body

    description = data.pop("description", None)
    if isinstance(description, str):
        # Multi-line "|" blocks collapse to a single line
        description = " ".join(
            line.strip() for line in description.splitlines() if line.strip()
        ) or None
    elif description is not None:
        description = str(description)

    unlocks = data.pop("unlocks", None)
    if unlocks is not None:
        unlocks = [str(u).strip() for u in unlocks if str(u).strip()] if isinstance(unlocks, list) else None

    return FrontMatter(description=description, unlocks=unlocks, extra=data), body


def extract_first_paragraph(markdown: str) -> str | None:
    """First sentence of the first paragraph, or its first 150 chars."""
    match = FIRST_PARAGRAPH_PATTERN.search(markdown)
    if not match:
        return None

    paragraph = match.group(1).strip()
    sentence = FIRST_SENTENCE_PATTERN.match(paragraph)
    if sentence:
        return sentence.group(0).strip()
    if len(paragraph) > 150:
        return paragraph[:150] + "..."
    return paragraph


def extract_name(markdown: str, file_name: str | None = None) -> str:
    """Name from the first H1, else the title-cased file name."""
    heading = TITLE_PATTERN.search(markdown)
    if heading:
        return heading.group(1).strip()

    if file_name:
        stem = Path(file_name).stem
        return " ".join(w[:1].upper() + w[1:] for w in stem.split("-"))

    return "Document"


class MarkdownFormat(ContentFormat):
    """
    Parses markdown into resource nodes.

    In split mode (default) every heading becomes a node nested under the
    nearest preceding heading of a lower level. Otherwise the whole
    document becomes one node.
    """

    name = "markdown"

    def __init__(self, split: bool = True, route_type: RouteType = "resource"):
        """
        Initialize the markdown format.

        Args:
            split: Split into sections by heading
            route_type: "resource" or "instruction"; stored as resource_type
        """
        self.split = split
        self.route_type = route_type

    def can_handle(self, content_type: str) -> bool:
        return (
            content_type in ("text/markdown", "text/plain")
            or "markdown" in content_type
        )

    def parse(self, content: RawContent, base_path: str) -> list[ResourceNode]:
        front_matter, body = parse_front_matter(content.text)
        file_name = content.metadata.get("file_name")
        name = extract_name(body, file_name)
        description = (front_matter.description if front_matter else None) or extract_first_paragraph(body)

        if not self.split:
            return [
                ResourceNode(
                    id=base_path,
                    name=name,
                    path=base_path,
                    metadata=ResourceMetadata(
                        content=body,
                        description=description,
                        last_updated=content.metadata.get("last_modified")
                        or datetime.now(timezone.utc).isoformat(),
                        file_name=file_name,
                        unlocks=front_matter.unlocks if front_matter else None,
                        resource_type=self.route_type,
                        extra=front_matter.extra if front_matter else {},
                    ),
                )
            ]

        return self._parse_with_headings(body, base_path, name, description)

    def _parse_with_headings(
        self,
        markdown: str,
        base_path: str,
        doc_name: str,
        doc_description: str | None,
    ) -> list[ResourceNode]:
        tree = build_heading_tree(markdown.split("\n"))

        if not tree:
            return [
                ResourceNode(
                    id=base_path,
                    name=doc_name,
                    path=base_path,
                    metadata=ResourceMetadata(
                        content=markdown.strip(),
                        description=doc_description,
                        resource_type=self.route_type,
                    ),
                )
            ]

        return self._to_nodes(tree, base_path, doc_description)

    def _to_nodes(
        self,
        headings: list[_Heading],
        base_path: str,
        root_description: str | None = None,
        parent_path: str = "",
    ) -> list[ResourceNode]:
        nodes = []
        seen: dict[str, int] = {}
        for i, heading in enumerate(headings):
            # Repeated sibling headings become "example", "example-2", ...
            seen[heading.slug] = seen.get(heading.slug, 0) + 1
            slug = heading.slug if seen[heading.slug] == 1 else f"{heading.slug}-{seen[heading.slug]}"
            path = f"{parent_path or base_path}/{slug}"
            # Only the document's first top-level H1 carries its description
            is_root = heading.level == 1 and not parent_path and i == 0

            nodes.append(
                ResourceNode(
                    id=path,
                    name=heading.text,
                    path=path,
                    metadata=ResourceMetadata(
                        content=render_heading(heading),
                        heading_level=heading.level,
                        description=root_description if is_root else None,
                        resource_type=self.route_type,
                    ),
                    children=self._to_nodes(heading.children, base_path, None, path),
                )
            )
        return nodes


def build_heading_tree(lines: list[str]) -> list[_Heading]:
    """
    Nest headings by level.

    A new heading closes every open heading at the same or a deeper level.
    Lines before the first heading are dropped.
    """
    roots: list[_Heading] = []
    stack: list[_Heading] = []

    for line in lines:
        match = HEADING_PATTERN.match(line)
        if match:
            text = match.group(2).strip()
            heading = _Heading(level=len(match.group(1)), text=text, slug=slugify(text))

            while stack and stack[-1].level >= heading.level:
                stack.pop()

            if stack:
                stack[-1].children.append(heading)
            else:
                roots.append(heading)
            stack.append(heading)
        elif stack:
            stack[-1].lines.append(line)

    return roots


def render_heading(heading: _Heading) -> str:
    """Heading line, own body, then children in document order."""
    result = f"{'#' * heading.level} {heading.text}\n\n"
    text = "\n".join(heading.lines).strip()
    if text:
        result += f"{text}\n\n"
    for child in heading.children:
        result += render_heading(child) + "\n\n"
    return result.strip()
