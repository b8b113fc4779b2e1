from fastapi import APIRouter, Depends
from sqlmodel import Session

from karigarverse.database import get_session
from karigarverse.services import category_service

router = APIRouter()


@router.get("")
def list_categories(session: Session = Depends(get_session)):
    return {"data": category_service.list_categories(session)}


@router.get("/slug/{slug}")
def get_category_by_slug(slug: str, session: Session = Depends(get_session)):
    return {"data": category_service.get_category_by_slug(session, slug)}
