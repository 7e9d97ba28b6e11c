"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from coursestore.app.api.v1.endpoints import (
    auth, catalog, payment_methods, checkout, invoices, admin_invoices
)

router = APIRouter()

router.include_router(auth.router)

# Storefront browsing
router.include_router(catalog.router)
router.include_router(payment_methods.router)

# Cart and settlement
router.include_router(checkout.router)
router.include_router(invoices.router)

# Administration
router.include_router(admin_invoices.router)
