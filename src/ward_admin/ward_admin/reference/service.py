from __future__ import annotations

from .lookups import ReferenceData
from .repository import ReferenceRepository


class ReferenceService:
    def __init__(self, reference: ReferenceRepository):
        self._reference = reference

    def load(self) -> ReferenceData:
        return ReferenceData.build(
            users=self._reference.list_users(),
            organizations=self._reference.list_organizations(),
            hymns=self._reference.list_hymns(),
            members=self._reference.list_members(),
        )
