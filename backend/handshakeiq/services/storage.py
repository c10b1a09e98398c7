# backend/handshakeiq/services/storage.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.dossier import Dossier
from ..models.note import Note
from ..models.user import User
from ..schemas.dossier import DossierCreate, DossierUpdate, UserContext, UserUpsert

logger = logging.getLogger(__name__)


class DossierStorage:
    """
    CRUD over users, dossiers and notes.

    Every dossier/note operation is scoped to the explicit `UserContext`;
    rows owned by someone else are indistinguishable from missing rows.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def upsert_user(self, data: UserUpsert) -> User:
        user = self.get_user(data.id)
        values = data.model_dump(exclude_unset=True)
        if user is None:
            user = User(**values)
            self.db.add(user)
        else:
            for field, value in values.items():
                setattr(user, field, value)
            user.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(user)
        return user

    # ------------------------------------------------------------------
    # Dossiers
    # ------------------------------------------------------------------

    def save_dossier(self, ctx: UserContext, data: DossierCreate) -> Dossier:
        dossier = Dossier(user_id=ctx.user_id, **data.model_dump(mode="json"))
        self.db.add(dossier)
        self.db.commit()
        self.db.refresh(dossier)
        logger.info(
            "Dossier saved",
            extra={"user_id": ctx.user_id, "step": "save_dossier"},
        )
        return dossier

    def list_dossiers(self, ctx: UserContext) -> List[Dossier]:
        return (
            self.db.query(Dossier)
            .filter(Dossier.user_id == ctx.user_id)
            .order_by(Dossier.updated_at.desc(), Dossier.created_at.desc())
            .all()
        )

    def get_dossier(self, ctx: UserContext, dossier_id: str) -> Optional[Dossier]:
        return (
            self.db.query(Dossier)
            .filter(Dossier.id == dossier_id, Dossier.user_id == ctx.user_id)
            .first()
        )

    def update_dossier(self, ctx: UserContext, dossier_id: str, data: DossierUpdate) -> Optional[Dossier]:
        dossier = self.get_dossier(ctx, dossier_id)
        if dossier is None:
            return None
        for field, value in data.model_dump(mode="json", exclude_unset=True).items():
            setattr(dossier, field, value)
        dossier.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(dossier)
        return dossier

    def delete_dossier(self, ctx: UserContext, dossier_id: str) -> bool:
        dossier = self.get_dossier(ctx, dossier_id)
        if dossier is None:
            return False
        self.db.delete(dossier)
        self.db.commit()
        return True

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def _get_note(self, ctx: UserContext, note_id: str) -> Optional[Note]:
        return (
            self.db.query(Note)
            .join(Dossier, Note.dossier_id == Dossier.id)
            .filter(Note.id == note_id, Dossier.user_id == ctx.user_id)
            .first()
        )

    def add_note(self, ctx: UserContext, dossier_id: str, content: str) -> Optional[Note]:
        if self.get_dossier(ctx, dossier_id) is None:
            return None
        note = Note(dossier_id=dossier_id, content=content)
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    def list_notes(self, ctx: UserContext, dossier_id: str) -> Optional[List[Note]]:
        if self.get_dossier(ctx, dossier_id) is None:
            return None
        return (
            self.db.query(Note)
            .filter(Note.dossier_id == dossier_id)
            .order_by(Note.created_at.desc())
            .all()
        )

    def update_note(self, ctx: UserContext, note_id: str, content: str) -> Optional[Note]:
        note = self._get_note(ctx, note_id)
        if note is None:
            return None
        note.content = content
        note.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(note)
        return note

    def delete_note(self, ctx: UserContext, note_id: str) -> bool:
        note = self._get_note(ctx, note_id)
        if note is None:
            return False
        self.db.delete(note)
        self.db.commit()
        return True
