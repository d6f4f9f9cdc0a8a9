import re
from datetime import date, time

from pydantic import BaseModel, Field, field_validator, model_validator

from categories import Category

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class Credentials(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email")
        return v


class RegisterIn(Credentials):
    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError("Password must be at most 72 bytes")
        return v


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    date: date
    category: Category = Category.GENERAL
    priority: int = Field(default=0, ge=0)

    @field_validator("title")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be blank")
        return v


class PriorityUpdate(BaseModel):
    priority: int = Field(ge=0)


class TimeBlockCreate(BaseModel):
    label: str = Field(min_length=1, max_length=500)
    date: date
    start_time: time
    end_time: time
    category: Category = Category.WORK

    @field_validator("label")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Label must not be blank")
        return v

    @model_validator(mode="after")
    def _ordered(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class CategoryOut(BaseModel):
    value: str
    label: str
    color: str


class UserOut(BaseModel):
    id: str
    email: str


class UserEnvelope(BaseModel):
    user: UserOut


class Message(BaseModel):
    message: str
