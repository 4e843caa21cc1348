"""Data API command payloads and chunked inserts."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from pydataapi._constants import DEFAULT_CHUNK_SIZE, DEFAULT_CONCURRENCY, MAX_CHUNK_SIZE
from pydataapi._errors import (
    ERR_MSG_INVALID_ARGUMENTS,
    InsertManyError,
    InvalidArgumentError,
)
from pydataapi._utils import validate_has_length
from pydataapi.query.filters import Filter
from pydataapi.query.projection import Projection, projection_to_dict
from pydataapi.query.sort import Sort, sort_to_dict
from pydataapi.query.update import Update

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Command:
    """A Data API command: ``{name: {filter, sort, projection, ...}}``.

    >>> Command("findOne").with_filter(eq("_id", 1)).to_dict()
    {'findOne': {'filter': {'_id': {'$eq': 1}}}}
    """

    def __init__(self, name: str) -> None:
        validate_has_length(name, "command name")
        self.name = name
        self._payload: dict[str, Any] = {}

    def append(self, key: str, value: Any) -> Command:
        if value is not None:
            self._payload[key] = value
        return self

    def with_filter(self, f: Filter | Mapping[str, Any] | None) -> Command:
        if isinstance(f, Filter):
            f = f.to_dict()
        return self.append("filter", f)

    def with_projection(self, projection: Iterable[Projection] | None) -> Command:
        if projection is None:
            return self
        return self.append("projection", projection_to_dict(projection))

    def with_sort(self, sort: Iterable[Sort] | None) -> Command:
        if sort is None:
            return self
        return self.append("sort", sort_to_dict(sort))

    def with_update(self, update: Update | Mapping[str, Any] | None) -> Command:
        if isinstance(update, Update):
            update = update.to_dict()
        return self.append("update", update)

    def with_document(self, document: Any) -> Command:
        return self.append("document", document)

    def with_documents(self, documents: Sequence[Any] | None) -> Command:
        return self.append("documents", list(documents) if documents is not None else None)

    def with_replacement(self, replacement: Any) -> Command:
        return self.append("replacement", replacement)

    def with_options(self, **options: Any) -> Command:
        """Merge non-``None`` options into the ``options`` block."""
        given = {k: v for k, v in options.items() if v is not None}
        if given:
            self._payload.setdefault("options", {}).update(given)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {self.name: dict(self._payload)}

    def __repr__(self) -> str:
        return f"Command({self.to_dict()!r})"


def _chunks(items: Sequence[Any], size: int) -> list[list[Any]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def insert_many(
    documents: Sequence[Any],
    insert_chunk: Callable[[list[Any]], R],
    *,
    chunk_size: int | None = None,
    concurrency: int | None = None,
    ordered: bool = False,
) -> list[R]:
    """Insert ``documents`` in chunks through ``insert_chunk``.

    Unordered chunks run on a pool of ``concurrency`` threads and every
    chunk is attempted; results come back in chunk order. Ordered inserts
    run one chunk at a time and stop at the first failure.

    Raises:
        InvalidArgumentError: If the chunking options are inconsistent.
        InsertManyError: If a chunk fails; ``results`` holds the chunks that
            completed.
    """
    chunk_size = DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size
    concurrency = DEFAULT_CONCURRENCY if concurrency is None else concurrency
    if not 1 <= chunk_size <= MAX_CHUNK_SIZE:
        raise InvalidArgumentError(
            ERR_MSG_INVALID_ARGUMENTS,
            f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}, got {chunk_size}",
        )
    if concurrency < 1:
        raise InvalidArgumentError(
            ERR_MSG_INVALID_ARGUMENTS,
            f"concurrency must be at least 1, got {concurrency}",
        )
    if ordered and concurrency > 1:
        raise InvalidArgumentError(
            ERR_MSG_INVALID_ARGUMENTS,
            "cannot run ordered insert_many concurrently",
        )

    chunks = _chunks(documents, chunk_size)
    logger.debug(
        "insert_many: %d documents in %d chunks, concurrency=%d, ordered=%s",
        len(documents), len(chunks), concurrency, ordered,
    )
    results: list[Any] = [None] * len(chunks)
    if not chunks:
        return results

    if ordered:
        # stop at the first failing chunk
        for i, chunk in enumerate(chunks):
            try:
                results[i] = insert_chunk(chunk)
            except Exception as e:
                raise _chunk_failure(i, len(chunks), e, results) from e
        return results

    failures: list[tuple[int, Exception]] = []
    with ThreadPoolExecutor(max_workers=min(concurrency, len(chunks))) as pool:
        futures = [pool.submit(insert_chunk, chunk) for chunk in chunks]
        for i, future in enumerate(futures):
            try:
                results[i] = future.result()
            except Exception as e:
                failures.append((i, e))
    if failures:
        index, cause = failures[0]
        raise _chunk_failure(index, len(chunks), cause, results) from cause
    return results


def _chunk_failure(
    index: int, total: int, cause: Exception, results: list[Any]
) -> InsertManyError:
    logger.debug("insert_many: chunk %d of %d failed: %s", index, total, cause)
    return InsertManyError(
        "insert_many failed",
        f"chunk {index} of {total} failed: {cause}",
        wrapped=cause,
        results=results,
    )
