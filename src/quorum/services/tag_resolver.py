"""Resolution of user-supplied tag names to stable tag identifiers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from quorum.core.errors import ConflictError, ConsistencyError, ValidationError
from quorum.core.settings import settings
from quorum.repositories.tag_repo import TagStore

logger = logging.getLogger(__name__)


class TagResolver:
    """Maps tag names to ids, creating the missing tags.

    Runs inside the caller's transaction; nothing here commits. Each creation
    is isolated in a savepoint, so losing a unique-constraint race to another
    writer only discards that one insert before the name is re-read.
    """

    def __init__(self, session: Session, store: TagStore | None = None) -> None:
        self.session = session
        self.store = store or TagStore(session)

    def resolve(self, names: Sequence[str]) -> list[int]:
        """Return one tag id per input name.

        Duplicate names resolve to the same id and create at most one row.

        Raises:
            ValidationError: If ``names`` is not a sequence of tag names, or a
                name is rejected by the tag store.
            ConsistencyError: If a name kept conflicting after all retries.
        """
        if isinstance(names, str) or not isinstance(names, Sequence):
            raise ValidationError("Tags must be a list of names")

        resolved: dict[str, int] = {}
        tag_ids: list[int] = []
        for raw_name in names:
            name = self.store.normalize(raw_name)
            if name not in resolved:
                resolved[name] = self._get_or_create(name)
            tag_ids.append(resolved[name])
        return tag_ids

    def suggest(self, prefix: str) -> list[str]:
        """Return names of existing tags starting with ``prefix``.

        Prefixes shorter than ``TAG_SUGGEST_MIN_LENGTH`` yield no suggestions.
        """
        prefix = (prefix or "").strip()
        if len(prefix) < settings.tag_suggest_min_length:
            return []
        return [tag.name for tag in self.store.find_by_prefix(prefix)]

    def _get_or_create(self, name: str) -> int:
        for attempt in range(1, settings.tag_conflict_retries + 1):
            tag = self.store.find_by_name(name)
            if tag is not None:
                return tag.id
            try:
                return self.store.create(name).id
            except ConflictError:
                logger.debug("Tag %r created concurrently (attempt %d), re-reading", name, attempt)

        logger.error("Tag %r still conflicting after %d attempts", name, settings.tag_conflict_retries)
        raise ConsistencyError(f"Could not resolve tag {name!r}")
