"""
Serializadores simples sin depender de DRF.
"""
from dataclasses import dataclass, asdict
from typing import Optional

from accounts.models import Profile


@dataclass
class ProfileDTO:
    id: int
    full_name: str
    email: str
    role: str
    department: Optional[str]
    student_id: Optional[str]
    avatar_url: Optional[str]
    created_at: str

    @staticmethod
    def from_model(p: Profile) -> "ProfileDTO":
        return ProfileDTO(
            id=p.pk,
            full_name=p.full_name,
            email=p.email,
            role=p.role,
            department=p.department,
            student_id=p.student_id,
            avatar_url=(p.avatar.url if p.avatar else None),
            created_at=p.created_at.isoformat(),
        )

    def to_dict(self) -> dict:
        return asdict(self)
