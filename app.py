import logging
from contextlib import asynccontextmanager
from datetime import date, time, timedelta
from pathlib import Path
from typing import List, Optional

from fastapi import Depends, FastAPI, Form, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

import dashboard
import storage
from auth import authenticate, get_current_user, get_optional_user, hash_password, login_session, logout_session
from categories import CATEGORIES
from config import get_settings
from db import get_db, init_db
from logging_setup import setup_logging
from schemas import (
    CategoryOut,
    Credentials,
    Message,
    PriorityUpdate,
    RegisterIn,
    TaskCreate,
    TimeBlockCreate,
    UserEnvelope,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and create tables on startup"""
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    init_db()
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.production,
)
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
# slots offered by the time-block form, 06:00 through 23:00
templates.env.globals["time_slots"] = [time(hour=h) for h in range(6, 24)]
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")


@app.exception_handler(SQLAlchemyError)
async def database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
def health():
    """Health check endpoint for monitoring and CI"""
    return {"status": "ok"}


def _validated(model, **data):
    """Build a schema from form fields, turning validation errors into a 400."""
    try:
        return model(**data)
    except ValidationError as exc:
        message = exc.errors()[0]["msg"].removeprefix("Value error, ")
        raise HTTPException(status_code=400, detail=message)


def _parse_day(day: Optional[str]) -> date:
    if not day:
        return date.today()
    try:
        return date.fromisoformat(day)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date, expected YYYY-MM-DD")


# ---------------------------------------------------------------------------
# JSON API: auth
# ---------------------------------------------------------------------------

@app.post("/api/auth/register", response_model=UserEnvelope)
def register(payload: RegisterIn, request: Request, db: Session = Depends(get_db)):
    if storage.get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = storage.create_user(db, payload.email, hash_password(payload.password))
    logger.info("Registered user %s", user.id)
    login_session(request, user)
    return {"user": user.to_dict()}


@app.post("/api/auth/login", response_model=UserEnvelope)
def login(payload: Credentials, request: Request, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    login_session(request, user)
    return {"user": user.to_dict()}


@app.post("/api/auth/logout", response_model=Message)
def logout(request: Request):
    logout_session(request)
    return {"message": "Logged out"}


@app.get("/api/auth/me", response_model=UserEnvelope)
def me(user=Depends(get_current_user)):
    return {"user": user.to_dict()}


# ---------------------------------------------------------------------------
# JSON API: tasks
# ---------------------------------------------------------------------------

@app.get("/api/categories", response_model=List[CategoryOut])
def list_categories():
    return [info._asdict() for info in CATEGORIES.values()]


@app.get("/api/tasks")
def list_tasks(
    day: Optional[date] = Query(None, alias="date"),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tasks = storage.get_tasks(db, user.id, day or date.today())
    return [t.to_dict() for t in tasks]


@app.post("/api/tasks")
def create_task(payload: TaskCreate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    task = storage.create_task(db, user.id, payload.title, payload.date, payload.category.value, payload.priority)
    storage.update_daily_log(db, user.id, task.date)
    return task.to_dict()


def _owned_task(db, user, task_id):
    task = storage.get_task(db, user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@app.patch("/api/tasks/{task_id}/toggle")
def toggle_task(task_id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    task = storage.toggle_task(db, _owned_task(db, user, task_id))
    storage.update_daily_log(db, user.id, task.date)
    return task.to_dict()


@app.patch("/api/tasks/{task_id}/priority")
def update_task_priority(
    task_id: str,
    payload: PriorityUpdate,
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    # priority does not feed the score, no recompute
    task = storage.set_task_priority(db, _owned_task(db, user, task_id), payload.priority)
    return task.to_dict()


@app.delete("/api/tasks/{task_id}", response_model=Message)
def delete_task(task_id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    task = _owned_task(db, user, task_id)
    day = task.date
    storage.delete_task(db, task)
    storage.update_daily_log(db, user.id, day)
    return {"message": "Task deleted"}


# ---------------------------------------------------------------------------
# JSON API: time blocks
# ---------------------------------------------------------------------------

@app.get("/api/time-blocks")
def list_time_blocks(
    day: Optional[date] = Query(None, alias="date"),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    blocks = storage.get_time_blocks(db, user.id, day or date.today())
    return [b.to_dict() for b in blocks]


@app.post("/api/time-blocks")
def create_time_block(payload: TimeBlockCreate, user=Depends(get_current_user), db: Session = Depends(get_db)):
    block = storage.create_time_block(
        db,
        user.id,
        payload.label,
        payload.date,
        payload.start_time,
        payload.end_time,
        payload.category.value,
    )
    storage.update_daily_log(db, user.id, block.date)
    return block.to_dict()


def _owned_block(db, user, block_id):
    block = storage.get_time_block(db, user.id, block_id)
    if block is None:
        raise HTTPException(status_code=404, detail="Time block not found")
    return block


@app.patch("/api/time-blocks/{block_id}/toggle")
def toggle_time_block(block_id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    block = storage.toggle_time_block(db, _owned_block(db, user, block_id))
    storage.update_daily_log(db, user.id, block.date)
    return block.to_dict()


@app.delete("/api/time-blocks/{block_id}", response_model=Message)
def delete_time_block(block_id: str, user=Depends(get_current_user), db: Session = Depends(get_db)):
    block = _owned_block(db, user, block_id)
    day = block.date
    storage.delete_time_block(db, block)
    storage.update_daily_log(db, user.id, day)
    return {"message": "Time block deleted"}


# ---------------------------------------------------------------------------
# JSON API: daily logs / dashboard
# ---------------------------------------------------------------------------

@app.get("/api/daily-logs")
def list_daily_logs(user=Depends(get_current_user), db: Session = Depends(get_db)):
    return [log.to_dict() for log in storage.get_daily_logs(db, user.id)]


def _summary(db, user, day):
    tasks = storage.get_tasks(db, user.id, day)
    blocks = storage.get_time_blocks(db, user.id, day)
    logs = storage.get_daily_logs(db, user.id)
    return dashboard.summary(day, tasks, blocks, logs)


@app.get("/api/dashboard")
def dashboard_summary(
    day: Optional[date] = Query(None, alias="date"),
    user=Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _summary(db, user, day or date.today())


# ---------------------------------------------------------------------------
# Server-rendered pages
# ---------------------------------------------------------------------------

def _back_to(day: date):
    return RedirectResponse(url=f"/?day={day.isoformat()}", status_code=303)


def _to_login():
    return RedirectResponse(url="/login", status_code=303)


@app.get("/", response_class=HTMLResponse)
def home(request: Request, day: str = None, user=Depends(get_optional_user), db: Session = Depends(get_db)):
    if user is None:
        return _to_login()
    log_date = _parse_day(day)

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": settings.app_name,
            "user": user,
            "log_date": log_date,
            "prev_day": log_date - timedelta(days=1),
            "next_day": log_date + timedelta(days=1),
            "summary": _summary(db, user, log_date),
            "categories": list(CATEGORIES.values()),
        },
    )


@app.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return templates.TemplateResponse(
        request, "login.html", {"app_name": settings.app_name, "mode": "login", "error": None}
    )


@app.post("/login", response_class=HTMLResponse)
def login_form(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    user = authenticate(db, email.strip().lower(), password)
    if user is None:
        return templates.TemplateResponse(
            request,
            "login.html",
            {"app_name": settings.app_name, "mode": "login", "error": "Invalid credentials"},
            status_code=401,
        )
    login_session(request, user)
    return RedirectResponse(url="/", status_code=303)


@app.get("/register", response_class=HTMLResponse)
def register_page(request: Request):
    return templates.TemplateResponse(
        request, "login.html", {"app_name": settings.app_name, "mode": "register", "error": None}
    )


@app.post("/register", response_class=HTMLResponse)
def register_form(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    confirm_password: str = Form(...),
    db: Session = Depends(get_db),
):
    def fail(message):
        return templates.TemplateResponse(
            request,
            "login.html",
            {"app_name": settings.app_name, "mode": "register", "error": message},
            status_code=400,
        )

    if password != confirm_password:
        return fail("Passwords do not match")
    try:
        payload = RegisterIn(email=email, password=password)
    except ValidationError as exc:
        return fail(exc.errors()[0]["msg"].removeprefix("Value error, "))
    if storage.get_user_by_email(db, payload.email):
        return fail("Email already registered")

    user = storage.create_user(db, payload.email, hash_password(payload.password))
    logger.info("Registered user %s", user.id)
    login_session(request, user)
    return RedirectResponse(url="/", status_code=303)


@app.post("/logout")
def logout_form(request: Request):
    logout_session(request)
    return _to_login()


@app.post("/task")
def add_task(
    title: str = Form(...),
    category: str = Form("general"),
    priority: int = Form(0),
    day: str = Form(None),
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return _to_login()
    log_date = _parse_day(day)
    payload = _validated(TaskCreate, title=title, date=log_date, category=category, priority=priority)

    storage.create_task(db, user.id, payload.title, payload.date, payload.category.value, payload.priority)
    storage.update_daily_log(db, user.id, log_date)
    return _back_to(log_date)


@app.post("/task/toggle")
def toggle_task_form(
    task_id: str = Form(...),
    day: str = Form(None),
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return _to_login()
    t = storage.get_task(db, user.id, task_id)
    if t:
        storage.toggle_task(db, t)
        storage.update_daily_log(db, user.id, t.date)

    log_date = _parse_day(day)
    return _back_to(log_date)


@app.post("/task/priority")
def task_priority_form(
    task_id: str = Form(...),
    priority: int = Form(...),
    day: str = Form(None),
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return _to_login()
    payload = _validated(PriorityUpdate, priority=priority)
    t = storage.get_task(db, user.id, task_id)
    if t:
        storage.set_task_priority(db, t, payload.priority)

    return _back_to(_parse_day(day))


@app.post("/block")
def add_block(
    label: str = Form(...),
    start_time: str = Form(...),
    end_time: str = Form(...),
    category: str = Form("work"),
    day: str = Form(None),
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return _to_login()
    log_date = _parse_day(day)
    payload = _validated(
        TimeBlockCreate,
        label=label,
        date=log_date,
        start_time=start_time,
        end_time=end_time,
        category=category,
    )

    storage.create_time_block(
        db, user.id, payload.label, payload.date, payload.start_time, payload.end_time, payload.category.value
    )
    storage.update_daily_log(db, user.id, log_date)
    return _back_to(log_date)


@app.post("/block/toggle")
def toggle_block_form(
    block_id: str = Form(...),
    day: str = Form(None),
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if user is None:
        return _to_login()
    b = storage.get_time_block(db, user.id, block_id)
    if b:
        storage.toggle_time_block(db, b)
        storage.update_daily_log(db, user.id, b.date)

    return _back_to(_parse_day(day))


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

@app.get("/export")
def export_csv(day: str = None, user=Depends(get_optional_user), db: Session = Depends(get_db)):
    """Export tasks and time blocks for a given day as CSV"""
    if user is None:
        return _to_login()
    log_date = _parse_day(day)

    tasks = storage.get_tasks(db, user.id, log_date)
    blocks = storage.get_time_blocks(db, user.id, log_date)

    return StreamingResponse(
        iter([dashboard.day_csv(tasks, blocks)]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=consistency_{log_date}.csv"},
    )


@app.get("/export/weekly", response_class=PlainTextResponse)
def export_weekly(day: str = None, user=Depends(get_optional_user), db: Session = Depends(get_db)):
    """Export weekly report as Markdown"""
    if user is None:
        return _to_login()
    end_day = _parse_day(day)
    start_day = end_day - timedelta(days=6)

    tasks = storage.get_tasks_between(db, user.id, start_day, end_day)
    blocks = storage.get_time_blocks_between(db, user.id, start_day, end_day)
    logs = storage.get_daily_logs(db, user.id)

    return dashboard.weekly_report(end_day, tasks, blocks, logs)
