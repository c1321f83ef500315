from __future__ import annotations

from collections.abc import Iterator

from repobloat.models.enums import ObjectScope
from repobloat.models.objects import ObjectRef
from repobloat.store import RepositoryObjectStore


def enumerate_objects(store: RepositoryObjectStore, root: str, scope: ObjectScope) -> Iterator[ObjectRef]:
    """Yield one ``ObjectRef`` per distinct identifier, in traversal order.

    In all-history scope the same blob can be reached through several paths;
    only the first path seen is kept.  ``ObjectStoreError`` from the store
    propagates to the caller.
    """
    seen: set[str] = set()
    for identifier, path in store.list_objects(root, scope):
        if identifier in seen:
            continue
        seen.add(identifier)
        yield ObjectRef(identifier=identifier, logical_path=path)
