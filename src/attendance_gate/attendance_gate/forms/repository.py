from __future__ import annotations

from typing import Optional, Protocol

from .model import FormConfig


class FormConfigRepository(Protocol):
    """Stores one opaque FormConfig blob per course."""

    def get(self, course_id: str) -> Optional[FormConfig]:
        raise NotImplementedError

    def save(self, course_id: str, config: FormConfig) -> None:
        raise NotImplementedError
