from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from apps.api.models import ResourceIndex, ResourceSummary
from apps.api.services.collection_query import CollectionQuery, CollectionQueryService
from core.exceptions import InvalidPayloadError
from core.storage.fixture_store import FixtureStore, same_id

router = APIRouter(tags=["resources"])

READ_METHODS = ["GET", "HEAD"]


def get_store(request: Request) -> FixtureStore:
    return request.app.state.store


async def read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise InvalidPayloadError(f"Malformed JSON body: {exc}") from exc


def _collection_response(request: Request, store: FixtureStore, name: str, records: list | None = None) -> JSONResponse:
    query = CollectionQuery.from_params(request.query_params.multi_items())
    result = CollectionQueryService(store).run(
        name,
        query,
        page_url=lambda page: str(request.url.include_query_params(_page=page)),
        records=records,
    )
    return JSONResponse(content=result.items, headers=result.headers)


@router.api_route("/", methods=READ_METHODS, response_model=ResourceIndex)
async def list_resources(store: FixtureStore = Depends(get_store)) -> ResourceIndex:
    return ResourceIndex(
        resources=[
            ResourceSummary(name=name, kind="collection" if store.is_collection(name) else "singular", path=f"/{name}")
            for name in store.resource_names()
        ]
    )


@router.api_route("/db", methods=READ_METHODS)
async def get_database(store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    return store.snapshot()


@router.api_route("/{name}", methods=READ_METHODS)
async def get_resource(name: str, request: Request, store: FixtureStore = Depends(get_store)) -> Any:
    if store.is_singular(name):
        return store.get_singular(name)
    return _collection_response(request, store, name)


@router.post("/{name}")
async def create_resource(name: str, request: Request, store: FixtureStore = Depends(get_store)) -> JSONResponse:
    payload = await read_json_body(request)
    if store.is_singular(name):
        return JSONResponse(content=store.replace_singular(name, payload), status_code=status.HTTP_200_OK)
    return JSONResponse(content=store.create_item(name, payload), status_code=status.HTTP_201_CREATED)


@router.put("/{name}")
async def replace_singular(name: str, request: Request, store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    return store.replace_singular(name, await read_json_body(request))


@router.patch("/{name}")
async def patch_singular(name: str, request: Request, store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    return store.patch_singular(name, await read_json_body(request))


@router.api_route("/{name}/{item_id}", methods=READ_METHODS)
async def get_item(name: str, item_id: str, request: Request, store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    record = store.get_item(name, item_id)
    query = CollectionQuery.from_params(request.query_params.multi_items())
    return CollectionQueryService(store).attach_relations(name, record, query)


@router.put("/{name}/{item_id}")
async def replace_item(name: str, item_id: str, request: Request, store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    return store.replace_item(name, item_id, await read_json_body(request))


@router.patch("/{name}/{item_id}")
async def patch_item(name: str, item_id: str, request: Request, store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    return store.patch_item(name, item_id, await read_json_body(request))


@router.delete("/{name}/{item_id}")
async def delete_item(name: str, item_id: str, store: FixtureStore = Depends(get_store)) -> dict[str, Any]:
    store.delete_item(name, item_id)
    return {}


@router.api_route("/{name}/{item_id}/{child}", methods=READ_METHODS)
async def list_children(
    name: str, item_id: str, child: str, request: Request, store: FixtureStore = Depends(get_store)
) -> JSONResponse:
    parent = store.get_item(name, item_id)
    foreign_key = store.foreign_key(name)
    records = [record for record in store.list_items(child) if same_id(record.get(foreign_key), parent[store.id_field])]
    return _collection_response(request, store, child, records=records)


@router.post("/{name}/{item_id}/{child}", status_code=status.HTTP_201_CREATED)
async def create_child(
    name: str, item_id: str, child: str, request: Request, store: FixtureStore = Depends(get_store)
) -> dict[str, Any]:
    parent = store.get_item(name, item_id)
    payload = await read_json_body(request)
    if not isinstance(payload, dict):
        raise InvalidPayloadError("Request body must be a JSON object")
    payload[store.foreign_key(name)] = parent[store.id_field]
    return store.create_item(child, payload)
