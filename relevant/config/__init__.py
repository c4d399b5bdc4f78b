"""Dashboard configuration models."""

from relevant.config.query import PageQueryOptions, QueryOptions, build_query_options

__all__ = ["PageQueryOptions", "QueryOptions", "build_query_options"]
