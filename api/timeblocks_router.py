"""
Time Block API Router - REST endpoints over the BlockManager.

Provides endpoints for:
- Listing, range-querying and reading an owner's blocks
- Creating, updating and deleting blocks
- Advisory overlap checks
- Statistics, quick-task creation and CSV export

The authentication layer in front of this router resolves the caller and
forwards its identifier in the X-Owner-Id header.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import Response

from api.response_models import (
    ListResponse,
    MutationResponse,
    QuickTaskIn,
    StatsResponse,
    TimeBlockIn,
    TimeBlockOut,
)
from focusflow.errors import Forbidden, NotFound, TimeBlockError, ValidationError
from focusflow.store import get_store
from focusflow.time_truth import BlockManager, QuickAdd, export_filename

logger = logging.getLogger(__name__)

timeblocks_router = APIRouter(prefix="/api", tags=["Time Blocks"])

_manager: BlockManager | None = None


def get_manager() -> BlockManager:
    """Process-wide manager. Tests replace it via app.dependency_overrides."""
    global _manager  # noqa: PLW0603
    if _manager is None:
        _manager = BlockManager(get_store())
    return _manager


def get_owner_id(x_owner_id: str = Header(..., min_length=1)) -> str:
    return x_owner_id


def _http_error(e: TimeBlockError) -> HTTPException:
    """Map core error kinds to HTTP. Foreign and missing blocks look alike."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFound | Forbidden):
        return HTTPException(status_code=404, detail="Time block not found")
    logger.error("Time block request failed: %s", e)
    return HTTPException(status_code=500, detail="Internal storage error")


# ==== Collection ====


@timeblocks_router.get("/timeblocks", response_model=ListResponse)
def list_timeblocks(
    start: datetime | None = Query(None, description="Range start (containment)"),
    end: datetime | None = Query(None, description="Range end (containment)"),
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> ListResponse:
    """
    Owner's blocks, most recent first.

    With both start and end: only blocks fully inside the range, earliest first.
    """
    if (start is None) != (end is None):
        raise HTTPException(status_code=400, detail="start and end must be given together")
    try:
        if start is not None:
            blocks = manager.find_by_owner_and_range(owner_id, start, end)
        else:
            blocks = manager.find_by_owner(owner_id)
    except TimeBlockError as e:
        raise _http_error(e) from e
    return ListResponse.from_blocks(blocks)


@timeblocks_router.post("/timeblocks", response_model=TimeBlockOut, status_code=201)
def create_timeblock(
    body: TimeBlockIn,
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> TimeBlockOut:
    try:
        block = manager.create(
            owner_id, body.title, body.description, body.start_time, body.end_time
        )
    except TimeBlockError as e:
        raise _http_error(e) from e
    return TimeBlockOut.from_block(block)


@timeblocks_router.get("/timeblocks/overlaps", response_model=ListResponse)
def list_overlaps(
    start: datetime = Query(..., description="Candidate start"),
    end: datetime = Query(..., description="Candidate end"),
    exclude_id: str | None = Query(None, description="Block to ignore (the one being edited)"),
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> ListResponse:
    """Blocks that would collide with [start, end). Advisory only."""
    try:
        blocks = manager.find_overlapping(owner_id, start, end, exclude_id)
    except TimeBlockError as e:
        raise _http_error(e) from e
    return ListResponse.from_blocks(blocks)


# ==== Single block ====


@timeblocks_router.get("/timeblocks/{block_id}", response_model=TimeBlockOut)
def get_timeblock(
    block_id: str,
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> TimeBlockOut:
    try:
        block = manager.get_for_owner(block_id, owner_id)
    except TimeBlockError as e:
        raise _http_error(e) from e
    return TimeBlockOut.from_block(block)


@timeblocks_router.put("/timeblocks/{block_id}", response_model=TimeBlockOut)
def update_timeblock(
    block_id: str,
    body: TimeBlockIn,
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> TimeBlockOut:
    try:
        block = manager.update(
            block_id, owner_id, body.title, body.description, body.start_time, body.end_time
        )
    except TimeBlockError as e:
        raise _http_error(e) from e
    return TimeBlockOut.from_block(block)


@timeblocks_router.delete("/timeblocks/{block_id}", response_model=MutationResponse)
def delete_timeblock(
    block_id: str,
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> MutationResponse:
    try:
        manager.delete(block_id, owner_id)
    except TimeBlockError as e:
        raise _http_error(e) from e
    return MutationResponse(success=True, message="Time block deleted successfully")


# ==== Derived ====


@timeblocks_router.get("/stats", response_model=StatsResponse)
def get_stats(
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> StatsResponse:
    try:
        stats = manager.stats(owner_id)
    except TimeBlockError as e:
        raise _http_error(e) from e
    return StatsResponse.from_stats(stats)


@timeblocks_router.post("/quick-task", response_model=MutationResponse)
def quick_task(
    body: QuickTaskIn,
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> MutationResponse:
    """Create a one-hour block at the next occurrence of taskTime."""
    if not body.taskName or not body.taskTime:
        raise HTTPException(status_code=400, detail="Task name and time are required")
    try:
        block = QuickAdd(manager).add(owner_id, body.taskName, body.taskTime)
    except TimeBlockError as e:
        raise _http_error(e) from e
    return MutationResponse(
        success=True,
        message="Task added successfully",
        timeBlock=TimeBlockOut.from_block(block),
    )


@timeblocks_router.get("/export")
def export_csv(
    owner_id: str = Depends(get_owner_id),
    manager: BlockManager = Depends(get_manager),
) -> Response:
    """Owner's blocks as a CSV attachment."""
    try:
        if manager.stats(owner_id).count == 0:
            raise HTTPException(status_code=404, detail="No time blocks to export")
        content = manager.export_csv(owner_id)
    except TimeBlockError as e:
        raise _http_error(e) from e

    filename = export_filename(manager.clock.now().date())
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
