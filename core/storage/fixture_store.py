from __future__ import annotations

import copy
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping

from core.exceptions import (
    DuplicateIdError,
    FixtureLoadError,
    InvalidPayloadError,
    ResourceNotFoundError,
)
from core.logging import log_event

logger = logging.getLogger(__name__)

JSONObject = Dict[str, Any]


def singularize(name: str) -> str:
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith(("ses", "xes", "zes", "ches", "shes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def same_id(left: Any, right: Any) -> bool:
    return str(left) == str(right)


class FixtureStore:
    """In-memory JSON document backing the generic CRUD routes.

    Top-level keys holding a list are collections of records keyed by
    ``id_field``; keys holding an object are singular resources. Nothing is
    written back to the fixture file.
    """

    def __init__(self, data: Mapping[str, Any], id_field: str = "id", foreign_key_suffix: str = "Id") -> None:
        for name, value in data.items():
            if not isinstance(value, (list, dict)):
                raise FixtureLoadError(
                    f"Type of '{name}' ({type(value).__name__}) is not supported, use objects or arrays of objects"
                )
            if isinstance(value, list) and not all(isinstance(record, dict) for record in value):
                raise FixtureLoadError(f"Collection '{name}' must only contain objects")
        self._data: JSONObject = copy.deepcopy(dict(data))
        self.id_field = id_field
        self.foreign_key_suffix = foreign_key_suffix

    @classmethod
    def from_file(cls, path: str | Path, id_field: str = "id", foreign_key_suffix: str = "Id") -> "FixtureStore":
        fixture_path = Path(path)
        try:
            raw = fixture_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FixtureLoadError(f"Cannot read fixture file {fixture_path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise FixtureLoadError(f"Fixture file {fixture_path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise FixtureLoadError(f"Fixture file {fixture_path} must contain a JSON object")
        store = cls(data, id_field=id_field, foreign_key_suffix=foreign_key_suffix)
        log_event(logger, "fixture.loaded", path=str(fixture_path), resources=store.resource_names())
        return store

    def snapshot(self) -> JSONObject:
        return copy.deepcopy(self._data)

    def resource_names(self) -> List[str]:
        return list(self._data.keys())

    def is_collection(self, name: str) -> bool:
        return isinstance(self._data.get(name), list)

    def is_singular(self, name: str) -> bool:
        return isinstance(self._data.get(name), dict)

    def foreign_key(self, name: str) -> str:
        return f"{singularize(name)}{self.foreign_key_suffix}"

    # Collections

    def list_items(self, name: str) -> List[JSONObject]:
        return copy.deepcopy(self._collection(name))

    def get_item(self, name: str, item_id: Any) -> JSONObject:
        return copy.deepcopy(self._find(name, item_id))

    def create_item(self, name: str, payload: Any) -> JSONObject:
        collection = self._collection(name)
        record = copy.deepcopy(self._require_object(payload))
        item_id = record.get(self.id_field)
        if item_id is None:
            record[self.id_field] = self._next_id(collection)
        elif any(same_id(existing.get(self.id_field), item_id) for existing in collection):
            raise DuplicateIdError(name, item_id)
        collection.append(record)
        log_event(logger, "resource.created", resource=name, id=record[self.id_field])
        return copy.deepcopy(record)

    def replace_item(self, name: str, item_id: Any, payload: Any) -> JSONObject:
        collection = self._collection(name)
        body = self._require_object(payload)
        for index, existing in enumerate(collection):
            if same_id(existing.get(self.id_field), item_id):
                record = {key: copy.deepcopy(value) for key, value in body.items() if key != self.id_field}
                record[self.id_field] = existing[self.id_field]
                collection[index] = record
                log_event(logger, "resource.replaced", resource=name, id=record[self.id_field])
                return copy.deepcopy(record)
        raise ResourceNotFoundError(name, item_id)

    def patch_item(self, name: str, item_id: Any, payload: Any) -> JSONObject:
        body = self._require_object(payload)
        record = self._find(name, item_id)
        stored_id = record[self.id_field]
        record.update(copy.deepcopy(body))
        record[self.id_field] = stored_id
        log_event(logger, "resource.patched", resource=name, id=stored_id)
        return copy.deepcopy(record)

    def delete_item(self, name: str, item_id: Any) -> JSONObject:
        collection = self._collection(name)
        for index, existing in enumerate(collection):
            if same_id(existing.get(self.id_field), item_id):
                removed = collection.pop(index)
                break
        else:
            raise ResourceNotFoundError(name, item_id)
        dependents = self._remove_dependents(name, removed[self.id_field])
        log_event(logger, "resource.deleted", resource=name, id=removed[self.id_field], dependents=dependents)
        return removed

    # Singular resources

    def get_singular(self, name: str) -> JSONObject:
        return copy.deepcopy(self._singular(name))

    def replace_singular(self, name: str, payload: Any) -> JSONObject:
        self._singular(name)
        self._data[name] = copy.deepcopy(self._require_object(payload))
        log_event(logger, "resource.replaced", resource=name)
        return copy.deepcopy(self._data[name])

    def patch_singular(self, name: str, payload: Any) -> JSONObject:
        resource = self._singular(name)
        resource.update(copy.deepcopy(self._require_object(payload)))
        log_event(logger, "resource.patched", resource=name)
        return copy.deepcopy(resource)

    # Internals

    def _collection(self, name: str) -> List[JSONObject]:
        if name not in self._data:
            raise ResourceNotFoundError(name)
        value = self._data[name]
        if not isinstance(value, list):
            raise InvalidPayloadError(f"'{name}' is not a collection")
        return value

    def _singular(self, name: str) -> JSONObject:
        if name not in self._data:
            raise ResourceNotFoundError(name)
        value = self._data[name]
        if not isinstance(value, dict):
            raise InvalidPayloadError(f"'{name}' is not a singular resource")
        return value

    def _find(self, name: str, item_id: Any) -> JSONObject:
        for record in self._collection(name):
            if isinstance(record, dict) and same_id(record.get(self.id_field), item_id):
                return record
        raise ResourceNotFoundError(name, item_id)

    def _next_id(self, collection: List[JSONObject]) -> Any:
        ids = [record.get(self.id_field) for record in collection if isinstance(record, dict)]
        # bool is an int subclass but never a sequential id
        if all(isinstance(value, int) and not isinstance(value, bool) for value in ids):
            return max(ids, default=0) + 1
        return str(uuid.uuid4())

    def _remove_dependents(self, name: str, item_id: Any) -> int:
        foreign_key = self.foreign_key(name)
        removed = 0
        for other_name, value in self._data.items():
            if other_name == name or not isinstance(value, list):
                continue
            kept = [
                record
                for record in value
                if not (isinstance(record, dict) and foreign_key in record and same_id(record[foreign_key], item_id))
            ]
            removed += len(value) - len(kept)
            value[:] = kept
        return removed

    @staticmethod
    def _require_object(payload: Any) -> JSONObject:
        if not isinstance(payload, dict):
            raise InvalidPayloadError("Request body must be a JSON object")
        return payload
