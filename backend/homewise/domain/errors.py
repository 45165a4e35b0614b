# homewise/domain/errors.py
from __future__ import annotations


class HomewiseError(Exception):
    pass


class NotFoundError(HomewiseError, LookupError):
    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"Couldn't find {entity} {entity_id!r}.")
        self.entity = entity
        self.entity_id = entity_id


class InvalidInputError(HomewiseError, ValueError):
    pass


class GeocodingError(HomewiseError):
    pass
