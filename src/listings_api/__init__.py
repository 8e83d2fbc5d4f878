"""
Listings backend package.

The list-normalization engine lives in `listings_api.reconcile`; the FastAPI
app is importable as `listings_api.main.app`.
"""

from .reconcile import PageRequest, keep_all, normalize_list  # noqa: F401
