"""Panel registry built from rendered dimension grid markup.

Each dimension panel is made of four regions, each tagged with a `dimension`
attribute and one role class. The registry is assembled by four merge passes
over the document (plot, tooltip, title, legend), then validated: a panel
missing any region cannot be rendered and is excluded.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Literal

logger = logging.getLogger(__name__)

PanelRole = Literal["plot", "tooltip", "title", "legend"]

GRID_CONTAINER_ID = "dimension-time-series-area"

ROLE_CLASSES: tuple[tuple[PanelRole, str], ...] = (
    ("plot", "dimension-time-series-placeholder"),
    ("tooltip", "dimension-time-series-tooltip"),
    ("title", "dimension-time-series-title"),
    ("legend", "dimension-time-series-legend"),
)

class IncompletePanelError(ValueError):
    """Raised when a dimension panel is missing one or more regions."""

    def __init__(self, *, dimension: str, missing: tuple[str, ...]) -> None:
        """Initialize the error.

        Args:
            dimension: Dimension whose panel is incomplete.
            missing: Roles that were not found in the document.
        """

        super().__init__(f"Dimension panel {dimension!r} is missing regions: {', '.join(missing)}.")
        self.dimension = dimension
        self.missing = missing


@dataclass(frozen=True, slots=True)
class PanelRegion:
    """Opaque handle to one region of a dimension panel.

    Attributes:
        role: Which panel region this is.
        dimension: Verbatim value of the element's `dimension` attribute.
        tag: HTML tag name.
        element_id: The element `id` attribute, when present.
        position: Document order of the element's start tag.
    """

    role: PanelRole
    dimension: str
    tag: str
    element_id: str | None = None
    position: int = 0


@dataclass(slots=True)
class DimensionPanel:
    """The four regions that make up one dimension's chart panel."""

    dimension: str
    plot: PanelRegion | None = None
    tooltip: PanelRegion | None = None
    title: PanelRegion | None = None
    legend: PanelRegion | None = None

    def missing_roles(self) -> tuple[str, ...]:
        return tuple(role for role, _ in ROLE_CLASSES if getattr(self, role) is None)

    @property
    def is_complete(self) -> bool:
        return not self.missing_roles()


@dataclass(frozen=True, slots=True)
class _TaggedElement:
    tag: str
    classes: frozenset[str]
    dimension: str | None
    element_id: str | None
    position: int


class _DimensionElementCollector(HTMLParser):
    """Collect elements carrying a `dimension` attribute.

    When the grid container is present only elements inside it are collected;
    otherwise the whole document is scanned. The container is closed by the
    end tag that balances its own start tag, so unclosed or stray tags of other
    names inside it do not move its boundary.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.inside: list[_TaggedElement] = []
        self.everywhere: list[_TaggedElement] = []
        self.found_container = False
        self._position = 0
        self._container_tag: str | None = None
        self._container_nesting = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attrs_dict = {key: value for key, value in attrs}
        position = self._position
        self._position += 1

        if self._container_tag is None:
            if not self.found_container and attrs_dict.get("id") == GRID_CONTAINER_ID:
                self.found_container = True
                self._container_tag = tag
                self._container_nesting = 1
        elif tag == self._container_tag:
            self._container_nesting += 1

        dimension = attrs_dict.get("dimension")
        if dimension is not None:
            element = _TaggedElement(
                tag=tag,
                classes=frozenset((attrs_dict.get("class") or "").split()),
                dimension=dimension,
                element_id=attrs_dict.get("id"),
                position=position,
            )
            self.everywhere.append(element)
            if self._container_tag is not None:
                self.inside.append(element)

    def handle_endtag(self, tag: str) -> None:
        if tag != self._container_tag:
            return
        self._container_nesting -= 1
        if self._container_nesting == 0:
            self._container_tag = None

    @property
    def elements(self) -> list[_TaggedElement]:
        return self.inside if self.found_container else self.everywhere


class PanelRegistry(Mapping[str, DimensionPanel]):
    """Read-only mapping of dimension name to complete panel, in document order.

    Attributes:
        incomplete: Panels that were excluded because a region was missing.
    """

    def __init__(self, panels: dict[str, DimensionPanel], incomplete: dict[str, DimensionPanel]) -> None:
        self._panels = panels
        self.incomplete: Mapping[str, DimensionPanel] = incomplete

    def __getitem__(self, dimension: str) -> DimensionPanel:
        return self._panels[dimension]

    def __iter__(self) -> Iterator[str]:
        return iter(self._panels)

    def __len__(self) -> int:
        return len(self._panels)

    def __repr__(self) -> str:
        return f"PanelRegistry(dimensions={list(self._panels)!r}, incomplete={list(self.incomplete)!r})"


def build_registry(document: str, *, strict: bool = False) -> PanelRegistry:
    """Group dimension panel regions found in a document.

    Args:
        document: Rendered HTML containing the dimension grid.
        strict: Raise instead of logging when a panel is incomplete.

    Returns:
        PanelRegistry containing only panels with all four regions.

    Raises:
        IncompletePanelError: When `strict` is set and a panel is incomplete.
    """

    collector = _DimensionElementCollector()
    collector.feed(document or "")
    collector.close()
    elements = collector.elements

    assembled: dict[str, DimensionPanel] = {}
    for role, css_class in ROLE_CLASSES:
        for element in elements:
            if css_class not in element.classes or element.dimension is None:
                continue
            panel = assembled.get(element.dimension)
            if panel is None:
                panel = DimensionPanel(dimension=element.dimension)
                assembled[element.dimension] = panel
            setattr(
                panel,
                role,
                PanelRegion(
                    role=role,
                    dimension=element.dimension,
                    tag=element.tag,
                    element_id=element.element_id,
                    position=element.position,
                ),
            )

    complete: dict[str, DimensionPanel] = {}
    incomplete: dict[str, DimensionPanel] = {}
    for dimension, panel in assembled.items():
        missing = panel.missing_roles()
        if not missing:
            complete[dimension] = panel
            continue
        if strict:
            raise IncompletePanelError(dimension=dimension, missing=missing)
        logger.warning("Skipping dimension panel %r: missing %s", dimension, ", ".join(missing))
        incomplete[dimension] = panel

    logger.debug("Built dimension panel registry with %d panel(s)", len(complete))
    return PanelRegistry(complete, incomplete)
