from __future__ import annotations

from typing import Optional, Protocol

from .model import LocationConfig


class LocationConfigRepository(Protocol):
    def get_global(self) -> Optional[LocationConfig]:
        raise NotImplementedError

    def save_global(self, config: LocationConfig) -> None:
        raise NotImplementedError

    def get_for_course(self, course_id: str) -> Optional[LocationConfig]:
        raise NotImplementedError

    def save_for_course(self, course_id: str, config: LocationConfig) -> None:
        raise NotImplementedError

    def delete_for_course(self, course_id: str) -> bool:
        raise NotImplementedError
