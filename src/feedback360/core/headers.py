from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from feedback360.core.text import collapse_whitespace, fold

HEADER_DELIMITER = ">>"

# Collaborator segments that mark metadata columns, not people.
SENTINEL_COLLABORATORS = frozenset({fold("Data"), fold("Submission Date")})

# The survey tool appends _1, _2, ... when the same person appears twice.
_INDEX_SUFFIX_RE = re.compile(r"_\d+\s*$")


@dataclass(frozen=True)
class ParsedHeader:
    """An evaluation column: `Question >> Collaborator [>> InlineAnswer]`."""
    question: str
    collaborator: str
    inline_answer: Optional[str] = None


def parse_header(header: str) -> Optional[ParsedHeader]:
    """
    Split a raw column name on ">>".

    Returns None for anything that is not an evaluation field: fewer than two
    segments, an empty collaborator, or a sentinel such as "Submission Date".
    """
    if not isinstance(header, str):
        return None

    segments = [s.strip() for s in header.split(HEADER_DELIMITER)]
    if len(segments) < 2:
        return None

    question, collaborator = segments[0], segments[1]
    if not collaborator or fold(collaborator) in SENTINEL_COLLABORATORS:
        return None

    inline_answer = segments[2] if len(segments) > 2 and segments[2] else None
    return ParsedHeader(question=question, collaborator=collaborator, inline_answer=inline_answer)


def remove_index_suffix(name: str) -> str:
    return _INDEX_SUFFIX_RE.sub("", name)


def display_name(name: str) -> str:
    """Spelling as written with the duplicate suffix and extra spaces removed."""
    return collapse_whitespace(remove_index_suffix(name))


def collaborator_key(name: str) -> str:
    """Grouping identity: suffix removed, trimmed, accent- and case-folded."""
    return fold(remove_index_suffix(name.strip()))


@dataclass
class CollaboratorKeyResolver:
    """
    Maps display names to grouping keys for one batch.

    The first spelling seen for a key is the one shown in the output.
    """
    _names: Dict[str, str] = field(default_factory=dict)

    def resolve(self, name: str) -> str:
        key = collaborator_key(name)
        if key and key not in self._names:
            self._names[key] = display_name(name)
        return key

    def display_name(self, key: str) -> str:
        return self._names.get(key, key)

    def keys(self) -> List[str]:
        return list(self._names.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._names

    def __len__(self) -> int:
        return len(self._names)
