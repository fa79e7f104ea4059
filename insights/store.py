"""
Result store for analysis bundles.
Uses Streamlit session_state as backend when running inside the dashboard.
Falls back to an in-memory dict outside Streamlit.
"""

import json
import logging
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

SESSION_KEY = "_benchmark_results"


class ResultStore:
    """
    Keyed by assessment id. Storing again under the same id replaces the
    previous bundle; writes are serialized with a lock.
    """

    def __init__(self, use_session_state: bool = True):
        self.use_session_state = use_session_state
        self._memory: dict = {}
        self._lock = threading.Lock()

    def _store(self) -> dict:
        """Get the underlying store (session_state or memory dict)."""
        if not self.use_session_state:
            return self._memory
        try:
            import streamlit as st
            if SESSION_KEY not in st.session_state:
                st.session_state[SESSION_KEY] = {}
            return st.session_state[SESSION_KEY]
        except Exception:
            return self._memory

    def store(self, assessment_id: str, bundle: Dict[str, Any]) -> None:
        with self._lock:
            store = self._store()
            replaced = assessment_id in store
            store[assessment_id] = bundle
        logger.info(f"{'Replaced' if replaced else 'Stored'} results for {assessment_id}")

    def load(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        return self._store().get(assessment_id)

    def delete(self, assessment_id: str) -> bool:
        with self._lock:
            store = self._store()
            if assessment_id in store:
                del store[assessment_id]
                return True
        return False

    def list_ids(self) -> List[str]:
        return sorted(self._store().keys())

    def clear_all(self) -> None:
        with self._lock:
            self._store().clear()
        logger.info("Result store cleared")

    def export_json(self, assessment_id: str) -> Optional[str]:
        bundle = self.load(assessment_id)
        if bundle is None:
            return None
        return json.dumps(bundle, sort_keys=True, default=str)

    def stats(self) -> dict:
        store = self._store()
        return {"assessments": len(store), "backend": "memory" if store is self._memory else "session_state"}


# Singleton instance
results = ResultStore()
