from fastapi import APIRouter, Depends, HTTPException, Response

from ..models.user import User
from ..schemas.dossier import (
    DossierCreate,
    DossierOut,
    DossierUpdate,
    NoteCreate,
    NoteOut,
    UserContext,
    UserOut,
)
from ..services.storage import DossierStorage
from .deps import get_current_user, get_storage, get_user_context

router = APIRouter(tags=["dossiers"])


@router.get("/auth/user", response_model=UserOut)
def read_current_user(user: User = Depends(get_current_user)):
    return user


@router.post("/dossiers", response_model=DossierOut, status_code=201)
def save_dossier(
    payload: DossierCreate,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    return storage.save_dossier(ctx, payload)


@router.get("/dossiers", response_model=list[DossierOut])
def list_dossiers(
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    return storage.list_dossiers(ctx)


@router.get("/dossiers/{dossier_id}", response_model=DossierOut)
def get_dossier(
    dossier_id: str,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    dossier = storage.get_dossier(ctx, dossier_id)
    if not dossier:
        raise HTTPException(status_code=404, detail="Dossier not found")
    return dossier


@router.patch("/dossiers/{dossier_id}", response_model=DossierOut)
def update_dossier(
    dossier_id: str,
    payload: DossierUpdate,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    dossier = storage.update_dossier(ctx, dossier_id, payload)
    if not dossier:
        raise HTTPException(status_code=404, detail="Dossier not found")
    return dossier


@router.delete("/dossiers/{dossier_id}", status_code=204)
def delete_dossier(
    dossier_id: str,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    if not storage.delete_dossier(ctx, dossier_id):
        raise HTTPException(status_code=404, detail="Dossier not found")
    return Response(status_code=204)


@router.post("/dossiers/{dossier_id}/notes", response_model=NoteOut, status_code=201)
def add_note(
    dossier_id: str,
    payload: NoteCreate,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    note = storage.add_note(ctx, dossier_id, payload.content)
    if not note:
        raise HTTPException(status_code=404, detail="Dossier not found")
    return note


@router.get("/dossiers/{dossier_id}/notes", response_model=list[NoteOut])
def list_notes(
    dossier_id: str,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    notes = storage.list_notes(ctx, dossier_id)
    if notes is None:
        raise HTTPException(status_code=404, detail="Dossier not found")
    return notes


@router.patch("/notes/{note_id}", response_model=NoteOut)
def update_note(
    note_id: str,
    payload: NoteCreate,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    note = storage.update_note(ctx, note_id, payload.content)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


@router.delete("/notes/{note_id}", status_code=204)
def delete_note(
    note_id: str,
    ctx: UserContext = Depends(get_user_context),
    storage: DossierStorage = Depends(get_storage),
):
    if not storage.delete_note(ctx, note_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return Response(status_code=204)
