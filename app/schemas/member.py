from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator


class Role(str, Enum):
    DIRECTOR = "Director"
    CO_MANAGER = "Co-manager"
    MEMBER = "Member"

    @property
    def is_manager(self) -> bool:
        return self in (Role.DIRECTOR, Role.CO_MANAGER)

    @property
    def can_edit_logistics(self) -> bool:
        return self.is_manager

    @property
    def can_lock_slot(self) -> bool:
        return self.is_manager

    @property
    def can_manage_members(self) -> bool:
        return self.is_manager

    @property
    def can_propose_slot(self) -> bool:
        return self.is_manager


class MemberBase(BaseModel):
    name: str
    role: Role = Role.MEMBER
    badge: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be empty")
        return value


class MemberCreate(MemberBase):
    actorId: str
    email: Optional[EmailStr] = None
    photoURL: Optional[str] = None


class Member(MemberBase):
    id: str
    email: Optional[str] = None
    photoURL: Optional[str] = None


class MemberRoleUpdate(BaseModel):
    actorId: str
    role: Role


class MemberSeed(BaseModel):
    """Identity handed over by the sign-in provider"""

    userId: str
    displayName: str
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None

    def to_member(self, role: Role = Role.MEMBER, badge: Optional[str] = None) -> Member:
        return Member(
            id=self.userId,
            name=self.displayName,
            role=role,
            badge=badge,
            email=self.email,
            photoURL=self.avatar,
        )
