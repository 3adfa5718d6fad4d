import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from auth import get_current_user_id
from queries import page_count
from repository import EntryRepository
from schemas import (
    EntryCreateRequest,
    EntryFilters,
    EntryListResponse,
    EntryUpdateRequest,
    JournalEntryResponse,
    MessageResponse,
    PageParams,
)

logger = logging.getLogger(__name__)

# All routes require authentication
router = APIRouter(dependencies=[Depends(get_current_user_id)])

NOT_FOUND = "Entry not found"
SERVER_ERROR = "Server error"


def get_repository(request: Request) -> EntryRepository:
    return request.app.state.repository


def list_filters(
    search: Optional[str] = None,
    mood: Optional[str] = None,
    tag: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
) -> EntryFilters:
    try:
        return EntryFilters(search=search, mood=mood, tag=tag, start_date=start_date, end_date=end_date)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))


def page_params(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
) -> PageParams:
    max_limit = request.app.state.settings.max_page_limit
    if limit > max_limit:
        raise RequestValidationError([{
            "type": "less_than_equal",
            "loc": ("query", "limit"),
            "msg": f"Input should be less than or equal to {max_limit}",
            "input": limit,
        }])
    return PageParams(page=page, limit=limit)


@router.get("", response_model=EntryListResponse)
def list_entries(
    filters: EntryFilters = Depends(list_filters),
    params: PageParams = Depends(page_params),
    user_id: str = Depends(get_current_user_id),
    repo: EntryRepository = Depends(get_repository),
):
    """
    Page through the caller's entries, newest first, narrowed by any filters given.
    """
    try:
        entries, total = repo.list_entries(user_id, filters, params)
    except Exception as e:
        logger.error(f"Get all entries error: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    return {
        "entries": entries,
        "pagination": {
            "page": params.page,
            "limit": params.limit,
            "total": total,
            "pages": page_count(total, params.limit),
        },
    }


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    repo: EntryRepository = Depends(get_repository),
):
    try:
        entry = repo.get_entry(user_id, entry_id)
    except Exception as e:
        logger.error(f"Get entry error: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    if entry is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return entry


@router.post("", response_model=JournalEntryResponse, status_code=201)
def create_entry(
    body: EntryCreateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: EntryRepository = Depends(get_repository),
):
    try:
        return repo.create_entry(user_id, body.model_dump(mode="json"))
    except Exception as e:
        logger.error(f"Create entry error: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)


@router.put("/{entry_id}", response_model=JournalEntryResponse)
def update_entry(
    entry_id: str,
    body: EntryUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    repo: EntryRepository = Depends(get_repository),
):
    """
    Write only the fields present in the body; everything else keeps its value.
    """
    try:
        entry = repo.update_entry(user_id, entry_id, body.changes())
    except Exception as e:
        logger.error(f"Update entry error: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    if entry is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return entry


@router.delete("/{entry_id}", response_model=MessageResponse)
def delete_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    repo: EntryRepository = Depends(get_repository),
):
    try:
        entry = repo.delete_entry(user_id, entry_id)
    except Exception as e:
        logger.error(f"Delete entry error: {e}")
        raise HTTPException(status_code=500, detail=SERVER_ERROR)

    if entry is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return {"message": "Entry deleted successfully"}
