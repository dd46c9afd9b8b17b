from __future__ import annotations

import os
import secrets
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from optima import (
    Actor,
    AlreadyCompleted,
    Session,
    SortOption,
    TaskCategory,
    setup_logging,
    workspace_root,
)
from optima.config import load_settings, log_dir


# ── Session ───────────────────────────────────────────────────
#
# One signed-in session per server process. All endpoints are async so
# every mutation runs on the event loop thread, the same thread the
# screen-time ticker fires on. Saves and hook commands run on worker
# threads so they never hold up the loop.

_session: Session | None = None


def _session_actor() -> Actor:
    return Actor(
        user_id=os.environ.get("OPTIMA_USERNAME") or None,
        display_name=os.environ.get("OPTIMA_DISPLAY_NAME") or os.environ.get("OPTIMA_USERNAME") or None,
    )


def _open_session() -> Session:
    global _session
    if _session is None or _session.closed:
        _session = Session(actor=_session_actor(), root=workspace_root())
    return _session


async def get_session() -> Session:
    return _open_session()


async def close_session() -> None:
    global _session
    if _session is not None:
        await _session.aclose()
        _session = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    root = workspace_root()
    settings = load_settings(root)
    setup_logging(log_dir=log_dir(root), console_level=settings.log_level)
    _open_session().start()
    try:
        yield
    finally:
        await close_session()


app = FastAPI(title="Optima", version="0.1.0", lifespan=lifespan)

security = HTTPBasic(auto_error=False)


# ── Auth ──────────────────────────────────────────────────────

def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("OPTIMA_USERNAME", "")
    expected_password = os.environ.get("OPTIMA_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


# ── Helpers ───────────────────────────────────────────────────

def _parse_due_date(raw: Any) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid dueDate: {raw}")


def _feed_entry_or_404(completion_id: str, action):
    try:
        return action(completion_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Feed entry not found: {completion_id}")


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/state")
async def api_state(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    """Dashboard summary: screen time, streak, counts."""
    return session.manager.snapshot()


@app.get("/api/tasks")
async def api_list_tasks(
    sort: str = SortOption.DUE_DATE.value,
    category: str | None = None,
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    """Tasks in display order, optionally restricted to one category."""
    try:
        tasks = session.manager.sorted_view(sort, category)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"tasks": [t.to_dict() for t in tasks], "sort": sort, "category": category}


@app.post("/api/tasks")
async def api_create_task(
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    title = str(payload.get("title", "")).strip()
    if not title:
        raise HTTPException(status_code=400, detail="Missing title")
    try:
        task = session.manager.add_task(
            title,
            description=str(payload.get("description", "")),
            category=TaskCategory.parse(payload.get("category", TaskCategory.CUSTOM.value)),
            duration=float(payload.get("duration", 0)),
            points=int(payload.get("points", 0)),
            due_date=_parse_due_date(payload.get("dueDate")),
        )
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.save_async()
    return {"ok": True, "task": task.to_dict()}


@app.delete("/api/tasks/{task_id}")
async def api_delete_task(task_id: str, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    if not session.manager.delete_task(task_id):
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    await session.save_async()
    return {"ok": True, "task_id": task_id}


@app.post("/api/tasks/{task_id}/complete")
async def api_complete_task(task_id: str, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    try:
        completion = session.manager.complete_task(task_id)
    except AlreadyCompleted as e:
        raise HTTPException(status_code=409, detail=str(e))
    if completion is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    await session.save_async()
    return {"ok": True, "completion": completion.to_dict(), "state": session.manager.snapshot()}


@app.post("/api/tasks/{task_id}/share")
async def api_share_task(
    task_id: str,
    payload: dict[str, Any] = Body(default={}),
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    completion = session.manager.share_achievement(task_id, str(payload.get("comment", "")))
    if completion is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    await session.save_async()
    return {"ok": True, "completion": completion.to_dict()}


@app.get("/api/screen-time")
async def api_screen_time(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    return session.manager.snapshot()["screenTime"]


@app.get("/api/streak")
async def api_streak(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    return session.manager.snapshot()["streak"]


@app.get("/api/profile")
async def api_profile(username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    """Points, level, lifetime stats and achievements."""
    return session.manager.snapshot()["profile"]


@app.get("/api/feed")
async def api_feed(limit: int = 50, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    entries = session.manager.feed.entries[: max(0, limit)]
    return {"count": len(entries), "feed": [c.to_dict() for c in entries]}


@app.post("/api/feed/{completion_id}/like")
async def api_like(completion_id: str, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    completion = _feed_entry_or_404(completion_id, session.manager.like)
    await session.save_async()
    return {"ok": True, "likes": completion.likes}


@app.post("/api/feed/{completion_id}/unlike")
async def api_unlike(completion_id: str, username: str = Depends(get_current_user), session: Session = Depends(get_session)) -> dict[str, Any]:
    completion = _feed_entry_or_404(completion_id, session.manager.unlike)
    await session.save_async()
    return {"ok": True, "likes": completion.likes}


@app.post("/api/feed/{completion_id}/comments")
async def api_comment(
    completion_id: str,
    payload: dict[str, Any] = Body(...),
    username: str = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> dict[str, Any]:
    content = str(payload.get("content", ""))
    try:
        comment = _feed_entry_or_404(completion_id, lambda cid: session.manager.comment(cid, content))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await session.save_async()
    return {"ok": True, "comment": comment.to_dict()}
