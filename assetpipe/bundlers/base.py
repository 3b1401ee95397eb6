"""
Bundler contract shared by the JS and CSS bundlers.
"""

from typing import Any, Dict, Iterator, List, Protocol, Sequence, Type, TypeVar, runtime_checkable

from pydantic import BaseModel

from ..models import BundleOptions


M = TypeVar("M", bound=BaseModel)


@runtime_checkable
class Bundler(Protocol):
    """Turns parsed feeds into a single artifact."""

    def bundle(self, feeds: Sequence[Any], options: BundleOptions) -> str:
        ...


def iter_records(feeds: Sequence[Any]) -> Iterator[Dict[str, Any]]:
    """Yield every record of every feed, in feed order."""
    for position, feed in enumerate(feeds):
        if not isinstance(feed, list):
            raise TypeError(f"Feed at position {position} must be a list of records, got {type(feed).__name__}")
        yield from feed


def unique_records(feeds: Sequence[Any], model: Type[M]) -> List[M]:
    """Validate records against ``model`` and drop repeated ids.

    The first occurrence of an id wins so that feed order decides the output.
    """
    seen = set()
    records = []
    for raw in iter_records(feeds):
        record = model.model_validate(raw)
        if record.id in seen:
            continue
        seen.add(record.id)
        records.append(record)

    if not records:
        raise ValueError("No records to bundle")
    return records
