"""Text search collaborators.

The feed assembler treats a collaborator as an opaque ranked-candidate
source: it asks for ids matching a query and never re-ranks them itself.
``SqlTextSearch`` is the default backend; a dedicated search engine can be
plugged in by implementing ``SearchCollaborator``.
"""

from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.orm import Session

from videohub.exceptions import InvalidArgument
from videohub.models.content_models import Video, Comment, Tweet
from videohub.services.entity_store import EntityKind, EntityStore


class SearchCollaborator:
    """Interface for ranked text search over one entity kind."""

    def search(self, kind: EntityKind, query: str, fields: Sequence[str]) -> List[UUID]:
        """
        Return ids of entities matching ``query``, best match first.

        Args:
            kind: Entity kind to search
            query: Free-text query
            fields: Entity fields to match against
        """
        raise NotImplementedError


LIKE_ESCAPE = "\\"


def like_pattern(term: str) -> str:
    """Substring pattern for ``ilike`` with wildcard characters in ``term`` matched literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        term = term.replace(char, LIKE_ESCAPE + char)
    return f"%{term}%"


SEARCHABLE_FIELDS: Dict[EntityKind, Dict[str, object]] = {
    EntityKind.VIDEO: {"title": Video.title, "description": Video.description},
    EntityKind.COMMENT: {"content": Comment.content},
    EntityKind.TWEET: {"content": Tweet.content},
}


class SqlTextSearch(SearchCollaborator):
    """
    Case-insensitive term matching in SQL.

    Candidates matching any term are ranked by how many distinct terms they
    contain, then newest first, then by id.
    """

    def __init__(self, db: Session, max_candidates: int = 1000):
        self.db = db
        self.max_candidates = max_candidates

    def search(self, kind: EntityKind, query: str, fields: Sequence[str]) -> List[UUID]:
        kind = EntityKind(kind)
        terms = list(dict.fromkeys(term.lower() for term in query.split() if term.strip()))
        if not terms:
            return []

        available = SEARCHABLE_FIELDS.get(kind, {})
        unknown = [name for name in fields if name not in available]
        if unknown or not fields:
            raise InvalidArgument(f"Cannot search {kind.value} by {', '.join(unknown) or 'no fields'}")

        model = EntityStore.model_for(kind)
        columns = [available[name] for name in fields]
        conditions = [column.ilike(like_pattern(term), escape=LIKE_ESCAPE) for column in columns for term in terms]

        rows = (
            self.db.query(model.id, model.created_at, *columns)
            .filter(or_(*conditions))
            .limit(self.max_candidates)
            .all()
        )

        def score(row) -> int:
            text = " ".join(value or "" for value in row[2:]).lower()
            return sum(1 for term in terms if term in text)

        ranked = sorted(rows, key=lambda row: str(row[0]))
        ranked.sort(key=lambda row: row[1], reverse=True)
        ranked.sort(key=score, reverse=True)
        return [row[0] for row in ranked]
