"""
Organization Entity
"""

from dataclasses import dataclass

from app.core.domain import Entity


@dataclass
class Organization(Entity[str]):
    name: str = ""
    email: str | None = None
