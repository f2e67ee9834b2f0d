"""
Label API routes.
"""
from typing import List

from fastapi import APIRouter, Depends

from issuetrack.api.deps import get_db
from issuetrack.api.schemas import LabelResponse, SuccessResponse
from issuetrack.core.db import Database
from issuetrack.core.errors import NotFoundError
from issuetrack.core.models import Label

router = APIRouter()


@router.get("/labels", response_model=List[LabelResponse])
def list_labels(db: Database = Depends(get_db)):
    """List labels with usage counts, by name."""
    return db.labels.list()


@router.post("/labels", response_model=LabelResponse, status_code=201)
def create_label(payload: Label, db: Database = Depends(get_db)):
    """Create a label. Returns 409 if the name is taken."""
    return db.labels.create(payload)


@router.delete("/labels/{label_id}", response_model=SuccessResponse)
def delete_label(label_id: str, db: Database = Depends(get_db)):
    if not db.labels.delete(label_id):
        raise NotFoundError("Label not found")
    return {"success": True}
