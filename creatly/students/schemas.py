"""Pydantic schemas for the student surface."""

from uuid import UUID

from pydantic import EmailStr, Field

from creatly.catalog.models import Lesson
from creatly.core.schemas import ApiModel


class SignUpRequest(ApiModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class SignInRequest(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class LessonResponse(ApiModel):
    id: UUID
    name: str
    position: int
    content: str | None

    @classmethod
    def from_lesson(cls, lesson: Lesson) -> "LessonResponse":
        return cls(
            id=lesson.id,
            name=lesson.name,
            position=lesson.position,
            content=lesson.content,
        )


class LessonListResponse(ApiModel):
    data: list[LessonResponse]
