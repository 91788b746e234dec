from __future__ import annotations


class EngineError(Exception):
    pass


class NotFoundError(EngineError):
    """A referenced content item, organization or region is not in its registry."""

    def __init__(self, kind: str, ref_id: str):
        super().__init__(f"{kind} not found: {ref_id}")
        self.kind = kind
        self.ref_id = ref_id


class RegistryFetchError(EngineError):
    """A read against the document store failed; the computation must not continue."""

    def __init__(self, collection: str):
        super().__init__(f"failed to read collection {collection}")
        self.collection = collection
