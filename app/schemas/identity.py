"""The caller as vouched for by the identity provider."""

from __future__ import annotations

from pydantic import BaseModel

from app.core.config import settings


class Identity(BaseModel):
    staff_id: str
    role: str
    franchise_id: str | None = None
    franchise_name: str | None = None
    name: str | None = None
    employee_id: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in settings.STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == settings.ADMIN_ROLE

    @property
    def is_franchise_owner(self) -> bool:
        return self.role == settings.FRANCHISE_ROLE
