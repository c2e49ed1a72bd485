from .collection_query import CollectionQuery, CollectionQueryService, QueryResult

__all__ = ["CollectionQuery", "CollectionQueryService", "QueryResult"]
