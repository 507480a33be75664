"""Query execution package."""

from payshare.queries.executor import JobQueryExecutor, QueryExecutionError

__all__ = ["JobQueryExecutor", "QueryExecutionError"]
