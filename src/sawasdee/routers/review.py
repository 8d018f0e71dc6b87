from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..models.review import (
    ReviewCard,
    ReviewGradeRequest,
    ReviewGradeResponse,
    ReviewItemsResponse,
    ReviewSavedResponse,
    ReviewSaveRequest,
    ReviewSaveResponse,
    ReviewState,
    ReviewStats,
)
from ..srs import ReviewScheduler, UnknownItemError
from ..store import StoreError

router = APIRouter(tags=["review"])


def get_scheduler(request: Request) -> ReviewScheduler:
    """Return the process-wide scheduler attached by ``create_app``."""
    return request.app.state.scheduler


@router.get("/due", response_model=ReviewItemsResponse, summary="期限到来の復習カードを取得")
def review_due(
    request: Request,
    limit: Optional[int] = Query(default=None, ge=0),
    scheduler: ReviewScheduler = Depends(get_scheduler),
) -> ReviewItemsResponse:
    """Return due items, most overdue first (capped at SRS_MAX_DUE by default)."""
    items = scheduler.get_due_items()
    cap = limit if limit is not None else request.app.state.max_due
    cards = [ReviewCard.from_item(it) for it in items[:cap]]
    return ReviewItemsResponse(items=cards, total=len(items))


@router.get("/new", response_model=ReviewItemsResponse, summary="未学習の語を難易度順に取得")
def review_new(
    count: Optional[int] = Query(default=None, ge=0),
    scheduler: ReviewScheduler = Depends(get_scheduler),
) -> ReviewItemsResponse:
    items = scheduler.get_new_items(count)
    return ReviewItemsResponse(items=[ReviewCard.from_item(it) for it in items], total=len(items))


@router.post("/grade", response_model=ReviewGradeResponse, summary="採点して次回出題時刻を更新")
def review_grade(
    req: ReviewGradeRequest,
    scheduler: ReviewScheduler = Depends(get_scheduler),
) -> ReviewGradeResponse:
    """Grade a review item using SM-2 and return the next due time."""
    try:
        updated = scheduler.record_review(req.item_id, req.quality)
    except UnknownItemError:
        raise HTTPException(status_code=404, detail="item not found")
    except StoreError:
        raise HTTPException(status_code=503, detail="failed to persist review")
    return ReviewGradeResponse(
        ok=True,
        item_id=updated.item_id,
        next_due=updated.next_review_date,
        interval=updated.interval,
        ease_factor=updated.ease_factor,
        repetitions=updated.repetitions,
    )


@router.get("/stats", response_model=ReviewStats, summary="学習統計（習得語数・復習待ち・連続日数）")
def review_stats(scheduler: ReviewScheduler = Depends(get_scheduler)) -> ReviewStats:
    return scheduler.get_stats()


@router.post("/save", response_model=ReviewSaveResponse, summary="語を復習リストへ追加")
def review_save(
    req: ReviewSaveRequest,
    scheduler: ReviewScheduler = Depends(get_scheduler),
) -> ReviewSaveResponse:
    """Start tracking a word (e.g. bookmarked from a story). Idempotent."""
    metadata = req.model_dump(include={"text", "romanization", "translation"}, exclude_none=True)
    try:
        created = scheduler.add_item_to_review(req.item_id, metadata)
    except UnknownItemError:
        raise HTTPException(status_code=404, detail="item not found")
    except StoreError:
        raise HTTPException(status_code=503, detail="failed to persist item")
    return ReviewSaveResponse(ok=True, created=created)


@router.get("/saved/{item_id}", response_model=ReviewSavedResponse, summary="復習リストに登録済みか")
def review_saved(item_id: str, scheduler: ReviewScheduler = Depends(get_scheduler)) -> ReviewSavedResponse:
    return ReviewSavedResponse(item_id=item_id, saved=scheduler.is_item_saved(item_id))


@router.get("/items/{item_id}", response_model=ReviewState, summary="語ごとの SM-2 状態")
def review_item_state(item_id: str, scheduler: ReviewScheduler = Depends(get_scheduler)) -> ReviewState:
    """Return the stored state (camelCase, as persisted) or a default one."""
    return scheduler.get_item_state(item_id)


@router.delete("/state", summary="復習データを全消去")
def review_reset(scheduler: ReviewScheduler = Depends(get_scheduler)) -> dict[str, bool]:
    try:
        scheduler.reset()
    except StoreError:
        raise HTTPException(status_code=503, detail="failed to reset review data")
    return {"ok": True}
