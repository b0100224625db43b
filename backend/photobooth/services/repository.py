"""Firestore persistence for configurations and submissions."""
from datetime import datetime, timezone
from typing import Any, Optional

from google.cloud import firestore


class ConfigRepository:
    """One document per variant, keyed by variant name.

    Keying by name keeps the configuration a singleton without any query.
    """

    def __init__(self, db: firestore.Client, collection: str = "variant_configs") -> None:
        self._db = db
        self.collection = collection

    def get(self, variant: str) -> Optional[dict[str, Any]]:
        snapshot = self._db.collection(self.collection).document(variant).get()
        return snapshot.to_dict() if snapshot.exists else None

    def save(self, variant: str, data: dict[str, Any]) -> dict[str, Any]:
        """Replace the whole configuration document in one write.

        ``created_at`` is kept when supplied and set otherwise;
        ``updated_at`` is always refreshed.

        Returns:
            The document as written.
        """
        now = datetime.now(timezone.utc)
        document = {**data, "updated_at": now}
        if not document.get("created_at"):
            document["created_at"] = now
        self._db.collection(self.collection).document(variant).set(document)
        return document


class ResponseRepository:
    """Submissions stored in one collection per variant (``{variant}_responses``)."""

    def __init__(self, db: firestore.Client, collection_suffix: str = "_responses") -> None:
        self._db = db
        self.collection_suffix = collection_suffix

    def _collection(self, variant: str) -> Any:
        return self._db.collection(f"{variant}{self.collection_suffix}")

    def add(self, variant: str, data: dict[str, Any]) -> str:
        """Insert a submission and return its generated document id."""
        ref = self._collection(variant).document()
        ref.set(data)
        return ref.id

    def find_page(self, variant: str, offset: int, limit: int) -> list[dict[str, Any]]:
        """Submissions newest first by ``created_at``, with ``id`` included."""
        query = (
            self._collection(variant)
            .order_by("created_at", direction=firestore.Query.DESCENDING)
            .offset(offset)
            .limit(limit)
        )
        return [{**snapshot.to_dict(), "id": snapshot.id} for snapshot in query.stream()]

    def count(self, variant: str) -> int:
        results = self._collection(variant).count().get()
        return int(results[0][0].value)

    def get(self, variant: str, response_id: str) -> Optional[dict[str, Any]]:
        snapshot = self._collection(variant).document(response_id).get()
        if not snapshot.exists:
            return None
        return {**snapshot.to_dict(), "id": snapshot.id}

    def delete(self, variant: str, response_id: str) -> None:
        self._collection(variant).document(response_id).delete()
