"""
Serializadores simples sin depender de DRF.
"""
from dataclasses import dataclass, asdict
from typing import List, Optional

from studies.models import Comment, Study, Validation


def _iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def _display_name(user) -> str:
    if user is None:
        return "Unknown"
    profile = getattr(user, "profile", None)
    return (profile.full_name if profile else "") or user.email


@dataclass
class CategoryDTO:
    id: int
    name: str
    slug: str
    color: str


@dataclass
class StudyDTO:
    id: str
    title: str
    abstract: str
    author: str
    co_authors: List[str]
    adviser: str
    keywords: List[str]
    course: str
    department: str
    date_completed: Optional[str]
    status: str
    is_published: bool
    published_at: Optional[str]
    category: Optional[CategoryDTO] = None

    @staticmethod
    def from_model(s: Study) -> "StudyDTO":
        category = None
        if s.category_id:
            c = s.category
            category = CategoryDTO(id=c.pk, name=c.name, slug=c.slug, color=c.color)
        return StudyDTO(
            id=str(s.pk),
            title=s.title,
            abstract=s.abstract,
            author=_display_name(s.author),
            co_authors=list(s.co_authors or []),
            adviser=s.adviser,
            keywords=list(s.keywords or []),
            course=s.course,
            department=s.department,
            date_completed=_iso(s.date_completed),
            status=s.status,
            is_published=s.is_published,
            published_at=_iso(s.published_at),
            category=category,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ValidationDTO:
    id: int
    study_id: str
    reviewer: str
    status: str
    notes: Optional[str]
    reviewed_at: Optional[str]

    @staticmethod
    def from_model(v: Validation) -> "ValidationDTO":
        return ValidationDTO(
            id=v.pk,
            study_id=str(v.study_id),
            reviewer=_display_name(v.reviewer),
            status=v.status,
            notes=v.notes,
            reviewed_at=_iso(v.reviewed_at),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CommentDTO:
    id: int
    author: str
    body: str
    parent_id: Optional[int]
    created_at: Optional[str]

    @staticmethod
    def from_model(c: Comment) -> "CommentDTO":
        return CommentDTO(
            id=c.pk,
            author=_display_name(c.author),
            body=c.body,
            parent_id=c.parent_id,
            created_at=_iso(c.created_at),
        )

    def to_dict(self) -> dict:
        return asdict(self)
