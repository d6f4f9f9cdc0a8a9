"""
Daily-activity store: CRUD over users, tasks, time blocks and daily logs.

Every task/block lookup is scoped by owner, so another user's record reads
the same as a missing one.
"""

import logging

from sqlalchemy.exc import IntegrityError

from models import DailyLog, Task, TimeBlock, User
from scoring import calculate_consistency_score

logger = logging.getLogger(__name__)


# ---- Users ----

def get_user(db, user_id):
    return db.get(User, user_id)


def get_user_by_email(db, email):
    return db.query(User).filter(User.email == email).first()


def create_user(db, email, password_hash):
    user = User(email=email, password=password_hash)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# ---- Tasks ----

def get_tasks(db, user_id, day):
    return db.query(Task).filter(Task.user_id == user_id, Task.date == day).all()


def get_tasks_between(db, user_id, start_day, end_day):
    return (
        db.query(Task)
        .filter(Task.user_id == user_id, Task.date >= start_day, Task.date <= end_day)
        .order_by(Task.date.asc())
        .all()
    )


def get_task(db, user_id, task_id):
    return db.query(Task).filter(Task.id == task_id, Task.user_id == user_id).first()


def create_task(db, user_id, title, day, category, priority=0):
    task = Task(user_id=user_id, title=title, date=day, category=category, priority=priority)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def toggle_task(db, task):
    task.is_completed = not task.is_completed
    db.commit()
    db.refresh(task)
    return task


def set_task_priority(db, task, priority):
    task.priority = priority
    db.commit()
    db.refresh(task)
    return task


def delete_task(db, task):
    db.delete(task)
    db.commit()


# ---- Time blocks ----

def get_time_blocks(db, user_id, day):
    return (
        db.query(TimeBlock)
        .filter(TimeBlock.user_id == user_id, TimeBlock.date == day)
        .order_by(TimeBlock.start_time.asc())
        .all()
    )


def get_time_blocks_between(db, user_id, start_day, end_day):
    return (
        db.query(TimeBlock)
        .filter(TimeBlock.user_id == user_id, TimeBlock.date >= start_day, TimeBlock.date <= end_day)
        .order_by(TimeBlock.date.asc(), TimeBlock.start_time.asc())
        .all()
    )


def get_time_block(db, user_id, block_id):
    return db.query(TimeBlock).filter(TimeBlock.id == block_id, TimeBlock.user_id == user_id).first()


def create_time_block(db, user_id, label, day, start_time, end_time, category):
    block = TimeBlock(
        user_id=user_id,
        label=label,
        date=day,
        start_time=start_time,
        end_time=end_time,
        category=category,
    )
    db.add(block)
    db.commit()
    db.refresh(block)
    return block


def toggle_time_block(db, block):
    block.is_completed = not block.is_completed
    db.commit()
    db.refresh(block)
    return block


def delete_time_block(db, block):
    db.delete(block)
    db.commit()


# ---- Daily logs ----

def get_daily_logs(db, user_id):
    """All of a user's daily logs, most recent first."""
    return db.query(DailyLog).filter(DailyLog.user_id == user_id).order_by(DailyLog.date.desc()).all()


def get_daily_log(db, user_id, day):
    return db.query(DailyLog).filter(DailyLog.user_id == user_id, DailyLog.date == day).first()


def _apply_result(log, result):
    log.consistency_score = result.score
    log.tasks_completed = result.tasks_completed
    log.tasks_total = result.tasks_total
    log.blocks_completed = result.blocks_completed
    log.blocks_total = result.blocks_total


def upsert_daily_log(db, user_id, day, result):
    """Insert or replace the daily log for (user, day) with a ScoreResult."""
    log = get_daily_log(db, user_id, day)
    if log is None:
        log = DailyLog(user_id=user_id, date=day)
        _apply_result(log, result)
        db.add(log)
        try:
            db.commit()
        except IntegrityError:
            # another request inserted the row first
            db.rollback()
            log = get_daily_log(db, user_id, day)
            _apply_result(log, result)
            db.commit()
    else:
        _apply_result(log, result)
        db.commit()
    db.refresh(log)
    return log


def update_daily_log(db, user_id, day):
    """Recompute the consistency score for (user, day) and store it."""
    tasks = get_tasks(db, user_id, day)
    blocks = get_time_blocks(db, user_id, day)
    logs = get_daily_logs(db, user_id)

    result = calculate_consistency_score(tasks, blocks, logs, day)
    log = upsert_daily_log(db, user_id, day, result)
    logger.debug(
        "daily log %s/%s: score=%d tasks=%d/%d blocks=%d/%d",
        user_id,
        day,
        result.score,
        result.tasks_completed,
        result.tasks_total,
        result.blocks_completed,
        result.blocks_total,
    )
    return log
