"""Load and save the state document."""
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import settings
from .domain_errors import DomainError, conflict
from .models import StateDocument
from .seed_data import build_seed_state
from .state import AppState

logger = logging.getLogger(__name__)


def _state_conflict(key: str) -> DomainError:
    return conflict(
        "STATE_CONFLICT",
        "The data was changed by another request. Reload and try again.",
        key=key,
    )


class StateRepository:
    """Keeps the whole AppState under a single versioned key.

    ``save`` only succeeds when the stored document still has the version
    this repository loaded; otherwise it raises ``STATE_CONFLICT`` (409)
    and leaves the newer document in place.
    """

    def __init__(self, db: Session, key: str | None = None):
        self.db = db
        self.key = key or settings.STATE_KEY
        self.version: int | None = None

    def _row(self) -> StateDocument | None:
        # Re-read even if the session already holds the row.
        return (
            self.db.query(StateDocument)
            .populate_existing()
            .filter(StateDocument.key == self.key)
            .first()
        )

    def load(self) -> AppState:
        """Return the persisted state, bootstrapping the seed dataset when the key is absent."""
        row = self._row()
        if row is None:
            logger.info("No state stored under %s, bootstrapping seed data", self.key)
            state = build_seed_state()
            try:
                self.save(state)
            except DomainError:
                # Another request bootstrapped first; use its document.
                return self.load()
            return state
        self.version = row.version
        return AppState.from_document(row.payload)

    def save(self, state: AppState) -> None:
        payload = state.to_document()
        if self.version is None:
            self.db.add(StateDocument(key=self.key, payload=payload, version=1))
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise _state_conflict(self.key)
            self.version = 1
            return

        updated = (
            self.db.query(StateDocument)
            .filter(StateDocument.key == self.key, StateDocument.version == self.version)
            .update(
                {StateDocument.payload: payload, StateDocument.version: self.version + 1},
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.rollback()
            logger.warning("Stale save rejected for %s at version %d", self.key, self.version)
            raise _state_conflict(self.key)
        self.db.commit()
        self.version += 1
