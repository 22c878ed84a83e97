from __future__ import annotations

from dataclasses import dataclass
from typing import TextIO

from annotest.annotations import Query
from annotest.engine import Engine, EngineContext, QueryResult


@dataclass(frozen=True)
class QueryOutcome:
    query: Query
    result: QueryResult | None = None
    error: str | None = None


def location_spec(query: Query) -> str:
    return f"{query.filename}:#{query.start},{query.end}"


def invoke_query(
    query: Query,
    engine: Engine,
    context: EngineContext,
    *,
    log: TextIO | None = None,
) -> QueryOutcome:
    """Pose ``query`` to ``engine``; a failure becomes the outcome's error text."""
    try:
        result = engine.run_query(
            query.verb,
            location_spec(query),
            files=[query.filename],
            context=context,
            log=log,
        )
    except Exception as exc:  # the engine is opaque; any failure is this query's output
        return QueryOutcome(query=query, error=str(exc))
    return QueryOutcome(query=query, result=result)
