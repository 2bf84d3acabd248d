"""
Project cards: tag filter, text search and the focus viewer.

The focus viewer walks the currently visible cards and builds a dossier for
the selected one from its tags.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

HIGHLIGHTS: Dict[str, Tuple[str, ...]] = {
    "engine": ("Deterministic update phases", "Debug tooling & inspection", "Data-oriented design"),
    "graphics": ("Stylized rendering pipeline", "Realtime procedural shapes", "Shader-driven polish"),
    "gameplay": ("Clear mechanics & iteration", "Responsive feedback loops", "Tunable difficulty knobs"),
    "tools": ("Workflow acceleration", "Telemetry + profiling hooks", "Developer UX focus"),
    "animation": ("Readable arcs & timing", "Impact and anticipation", "Pose beats"),
}
GENERIC_HIGHLIGHTS = ("Clean architecture", "Polished UI/UX", "Performance-conscious")


@dataclass(frozen=True)
class ProjectCard:
    slug: str
    title: str = "Project"
    desc: str = "Description unavailable."
    tags: Tuple[str, ...] = ()

    @property
    def tag_text(self) -> str:
        return " ".join(self.tags).lower()


def load_projects(path: str | Path) -> List[ProjectCard]:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    cards = []
    for entry in raw:
        tags = entry.get("tags", ())
        if isinstance(tags, str):
            tags = tags.split()
        cards.append(
            ProjectCard(
                slug=entry["slug"],
                title=entry.get("title") or "Project",
                desc=entry.get("desc") or "Description unavailable.",
                tags=tuple(tags),
            )
        )
    return cards


def matches(card: ProjectCard, active_filter: str = "all", query: str = "") -> bool:
    q = (query or "").strip().lower()
    active = (active_filter or "all").lower()
    tags = card.tag_text
    matches_filter = active == "all" or active in tags
    matches_query = not q or q in card.title.lower() or q in card.desc.lower() or q in tags
    return matches_filter and matches_query


def filter_projects(
    cards: Sequence[ProjectCard], active_filter: str = "all", query: str = ""
) -> List[ProjectCard]:
    return [c for c in cards if matches(c, active_filter, query)]


@dataclass(frozen=True)
class Dossier:
    title: str
    desc: str
    kicker: str
    tags: Tuple[str, ...]
    highlights: Tuple[str, ...]
    build: str
    status: str
    complexity: str

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "desc": self.desc,
            "kicker": self.kicker,
            "tags": list(self.tags),
            "highlights": list(self.highlights),
            "build": self.build,
            "status": self.status,
            "complexity": self.complexity,
        }


def build_dossier(card: ProjectCard) -> Dossier:
    upper = []
    for t in card.tags:
        if t.upper() not in upper:
            upper.append(t.upper())

    picks: List[str] = []
    for t in card.tags:
        picks.extend(HIGHLIGHTS.get(t.lower(), ()))
    highlights = tuple((picks or list(GENERIC_HIGHLIGHTS))[:5])

    return Dossier(
        title=card.title,
        desc=card.desc,
        kicker=(card.tags[0] if card.tags else "DOSSIER").upper(),
        tags=tuple(upper[:6]),
        highlights=highlights,
        build="Release",
        status="Active",
        complexity="High" if "engine" in card.tags else "Medium",
    )


def summary_text(card: ProjectCard) -> str:
    """Text placed on the clipboard by the focus viewer's copy action."""
    return f"{card.title}\n\n{card.desc}"


@dataclass
class FocusViewer:
    cards: List[ProjectCard]
    active_filter: str = "all"
    query: str = ""
    is_open: bool = False
    index: int = 0
    selected: Optional[ProjectCard] = field(default=None)

    def visible(self) -> List[ProjectCard]:
        return filter_projects(self.cards, self.active_filter, self.query)

    def open(self, card: ProjectCard) -> Dossier:
        vc = self.visible()
        self.index = vc.index(card) if card in vc else 0
        self.is_open = True
        self.selected = card
        return build_dossier(card)

    def close(self) -> None:
        self.is_open = False
        self.selected = None

    def step(self, direction: int) -> Optional[Dossier]:
        """Move to the previous (-1) or next (+1) visible card, wrapping around."""
        vc = self.visible()
        if not vc:
            return None
        self.index = (self.index + direction + len(vc)) % len(vc)
        return self.open(vc[self.index])
