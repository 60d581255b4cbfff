"""Persistent stores used between build stages."""

from .record_store import RecordStore, RecordStoreError

__all__ = ["RecordStore", "RecordStoreError"]
