from __future__ import annotations


class FixtureLoadError(Exception):
    """Raised when the fixture document cannot be read or is not a JSON object."""


class FixtureStoreError(Exception):
    """Base class for errors raised by store operations."""


class ResourceNotFoundError(FixtureStoreError):
    def __init__(self, name: str, item_id: object | None = None) -> None:
        self.name = name
        self.item_id = item_id
        if item_id is None:
            message = f"Resource '{name}' not found"
        else:
            message = f"Item '{item_id}' not found in '{name}'"
        super().__init__(message)


class DuplicateIdError(FixtureStoreError):
    def __init__(self, name: str, item_id: object) -> None:
        self.name = name
        self.item_id = item_id
        super().__init__(f"Insert failed, duplicate id '{item_id}' in '{name}'")


class InvalidPayloadError(FixtureStoreError):
    pass


class InvalidQueryError(Exception):
    pass
