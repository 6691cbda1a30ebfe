"""Utility functions for the settlement kernel."""

from settlement_kernel.utils.hashing import canonicalize_json, hash_payload, snapshot

__all__ = ["canonicalize_json", "hash_payload", "snapshot"]
