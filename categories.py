from enum import Enum
from typing import NamedTuple


class Category(str, Enum):
    WORK = "work"
    HEALTH = "health"
    LEARNING = "learning"
    PERSONAL = "personal"
    GENERAL = "general"


class CategoryInfo(NamedTuple):
    value: str
    label: str
    color: str


CATEGORIES = {
    Category.WORK: CategoryInfo("work", "Work", "#3b82f6"),
    Category.HEALTH: CategoryInfo("health", "Health", "#22c55e"),
    Category.LEARNING: CategoryInfo("learning", "Learning", "#a855f7"),
    Category.PERSONAL: CategoryInfo("personal", "Personal", "#f97316"),
    Category.GENERAL: CategoryInfo("general", "General", "#6b7280"),
}


def category_info(value) -> CategoryInfo:
    """Look up label/color for a stored category value; unknown values read as General."""
    try:
        return CATEGORIES[Category(value)]
    except ValueError:
        return CATEGORIES[Category.GENERAL]


def category_color(value) -> str:
    return category_info(value).color
