"""Idea identity: content hashing and dedup-by-(owner, hash) resolution."""

import hashlib

import structlog

from galuxium.core.exceptions import IdeaConflict
from galuxium.db.models import Idea
from galuxium.db.store import ArtifactStore
from galuxium.schemas.intent import IntentRecord

logger = structlog.get_logger(__name__)


def content_hash(idea_text: str) -> str:
    """SHA-256 hex digest of the raw idea text. No normalization: whitespace and case are significant."""
    return hashlib.sha256(idea_text.encode("utf-8")).hexdigest()


class IdeaResolver:
    """Looks up an idea by (owner, content hash) and inserts it only when absent.

    At most one Idea row exists per (owner, hash). When a concurrent run wins
    the insert race, the unique constraint raises IdeaConflict and the row it
    inserted is re-selected and reused.
    """

    def __init__(self, store: ArtifactStore):
        self.store = store

    async def resolve(self, owner_id: str, idea_text: str, intent: IntentRecord) -> tuple[Idea, bool]:
        """Return (idea, reused).

        Raises:
            StoreError: Lookup or insert failed
        """
        dna_hash = content_hash(idea_text)

        existing = await self.store.find_idea_by_hash(owner_id, dna_hash)
        if existing is not None:
            logger.info("idea_reused", idea_id=str(existing.id), owner_id=owner_id)
            return existing, True

        try:
            idea = await self.store.insert_idea(owner_id, idea_text, dna_hash, intent)
        except IdeaConflict:
            existing = await self.store.find_idea_by_hash(owner_id, dna_hash)
            if existing is None:
                raise
            logger.info("idea_reused_after_conflict", idea_id=str(existing.id), owner_id=owner_id)
            return existing, True

        logger.info("idea_created", idea_id=str(idea.id), owner_id=owner_id)
        return idea, False
