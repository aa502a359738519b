"""Declarative base shared by all ORM models."""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # Models declare plain Column() attributes with non-Mapped annotations.
    __allow_unmapped__ = True
