"""Ordered tag sets, tag modification syntax and tag styling."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import click

logger = logging.getLogger(__name__)

ADD = "add"
REMOVE = "remove"

SLOT_COLORS = (
    "bright_cyan",
    "bright_magenta",
    "bright_yellow",
    "bright_blue",
    "bright_green",
    "white",
    "cyan",
    "magenta",
    "yellow",
    "blue",
    "green",
)


class TagSet:
    """Ordered tags without duplicates; earlier tags take priority in lookups."""

    def __init__(self, tags: Optional[Iterable[str]] = None) -> None:
        self._tags: list[str] = []
        for tag in tags or ():
            self.insert(tag)

    @classmethod
    def from_csv(cls, value: Optional[str]) -> TagSet:
        if not value:
            return cls()
        return cls(tag.strip() for tag in value.split(",") if tag.strip())

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self._tags == other._tags
        if isinstance(other, (list, tuple)):
            return self._tags == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagSet({self._tags!r})"

    def __str__(self) -> str:
        return ", ".join(self._tags)

    def is_empty(self) -> bool:
        return not self._tags

    def to_list(self) -> list[str]:
        return list(self._tags)

    def copy(self) -> TagSet:
        return TagSet(self._tags)

    def insert(self, tag: str) -> bool:
        if tag in self._tags:
            return False
        self._tags.append(tag)
        return True

    def insert_many(self, tags: Iterable[str]) -> None:
        for tag in tags:
            self.insert(tag)

    def remove(self, tag: str) -> None:
        self._tags = [t for t in self._tags if t != tag]

    def union(self, other: Iterable[str]) -> TagSet:
        result = self.copy()
        result.insert_many(other)
        return result

    def modify(self, entries: Iterable[str]) -> TagSet:
        """Apply ``+tag``/``-tag`` edits, or replace outright if no entry is marked."""
        return parse_modification(entries).apply(self)


@dataclass(frozen=True)
class TagEdit:
    op: str
    tag: str


@dataclass(frozen=True)
class TagModification:
    """Either a list of add/remove edits or a full replacement."""

    edits: tuple[TagEdit, ...] = ()
    replacement: Optional[tuple[str, ...]] = None

    def apply(self, base: TagSet) -> TagSet:
        if self.replacement is not None:
            return TagSet(self.replacement)
        result = base.copy()
        for edit in self.edits:
            if edit.op == ADD:
                result.insert(edit.tag)
            else:
                result.remove(edit.tag)
        return result


def _parse_edit(entry: str) -> Optional[TagEdit]:
    for marker, op in (("+", ADD), ("-", REMOVE)):
        if entry.startswith(marker):
            return TagEdit(op, entry[1:])
        if entry.endswith(marker):
            return TagEdit(op, entry[:-1])
    return None


def parse_modification(entries: Iterable[str]) -> TagModification:
    entries = list(entries)
    edits: list[TagEdit] = []
    plain: list[str] = []
    for entry in entries:
        edit = _parse_edit(entry)
        if edit is None:
            plain.append(entry)
        elif edit.tag:
            edits.append(edit)
    if len(edits) == 0 and len(plain) == len(entries):
        return TagModification(replacement=tuple(entries))
    if plain:
        logger.warning("Ignoring unmarked tags %s among tag edits.", ", ".join(plain))
    return TagModification(edits=tuple(edits))


@dataclass(frozen=True)
class TagIndex:
    """Every tag of a ledger in first-seen order; fixes each tag's color slot."""

    tags: tuple[str, ...] = ()

    @classmethod
    def from_tag_sets(cls, tag_sets: Iterable[Iterable[str]]) -> TagIndex:
        seen = TagSet()
        for tags in tag_sets:
            seen.insert_many(tags)
        return cls(tuple(seen))

    def is_known(self, tag: str) -> bool:
        return tag in self.tags

    def slot(self, tag: str) -> Optional[int]:
        if tag not in self.tags:
            return None
        return self.tags.index(tag) % len(SLOT_COLORS)


def format_tag(tag: str, index: TagIndex, colors: bool = True) -> str:
    if not colors:
        return tag
    slot = index.slot(tag)
    if slot is None:
        return click.style(f" {tag} ", bg="red", fg="white", bold=True)
    return click.style(f" {tag} ", bg=SLOT_COLORS[slot], fg="black", bold=True)


def format_tags(tags: Iterable[str], index: TagIndex, colors: bool = True) -> str:
    return ", ".join(format_tag(tag, index, colors) for tag in tags)
