"""Command palette with a small fuzzy ranking."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

SCORE_EMPTY = 10
SCORE_PREFIX = 14
SCORE_SUBSTRING = 9
SCORE_SUBSEQUENCE = 4


FIRST_PROJECT = "project:first"


@dataclass(frozen=True)
class Command:
    """A palette entry. `target` is what the host navigates to or toggles."""
    label: str
    hint: str
    target: Optional[str] = None
    action: Optional[Callable[[], object]] = None

    @property
    def haystack(self) -> str:
        return f"{self.label} {self.hint}".lower()


DEFAULT_COMMANDS = (
    Command("Go: Home", "#home", "#home"),
    Command("Go: About", "#about", "#about"),
    Command("Go: Projects", "#projects", "#projects"),
    Command("Go: Skills", "#skills", "#skills"),
    Command("Go: Timeline", "#timeline", "#timeline"),
    Command("Go: Contact", "#contact", "#contact"),
    Command("Toggle Mode", "theme", "theme"),
    Command("Open First Project", "focus", FIRST_PROJECT),
)


def score_command(cmd: Command, query: str) -> int:
    q = (query or "").strip().lower()
    if not q:
        return SCORE_EMPTY
    hay = cmd.haystack
    if hay.startswith(q):
        return SCORE_PREFIX
    if q in hay:
        return SCORE_SUBSTRING
    # all query characters present in order
    i = 0
    for ch in q:
        i = hay.find(ch, i)
        if i == -1:
            return 0
        i += 1
    return SCORE_SUBSEQUENCE


def rank_commands(commands: Sequence[Command], query: str) -> List[Command]:
    scored = [(score_command(c, query), c) for c in commands]
    # sorted() is stable, so equal scores keep declaration order
    return [c for s, c in sorted(scored, key=lambda sc: -sc[0]) if s > 0]


def resolve_target(cmd: Command, visible_slugs: Sequence[str]) -> Optional[str]:
    """Concrete target for a command; FIRST_PROJECT becomes project:<slug> of the first visible card."""
    if cmd.target == FIRST_PROJECT:
        return f"project:{visible_slugs[0]}" if visible_slugs else None
    return cmd.target


class CommandPalette:
    def __init__(self, commands: Sequence[Command] = DEFAULT_COMMANDS):
        self.commands = tuple(commands)
        self.items: List[Command] = list(self.commands)
        self.active = 0
        self.is_open = False

    def open(self) -> None:
        self.is_open = True
        self.items = list(self.commands)
        self.active = 0

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        if self.is_open:
            self.close()
        else:
            self.open()

    def filter(self, query: str) -> List[Command]:
        self.items = rank_commands(self.commands, query)
        self.active = 0
        return self.items

    def move(self, direction: int) -> int:
        n = max(1, len(self.items))
        self.active = (self.active + direction + n) % n
        return self.active

    def run_active(self) -> Optional[Command]:
        """Run the highlighted command and close the palette."""
        if not self.items:
            return None
        cmd = self.items[self.active]
        if cmd.action is not None:
            cmd.action()
        self.close()
        return cmd
