"""
api/routes/products.py -- Product listing.

GET /api/products requires a live session cookie (anonymous sessions count;
GET / hands one out). Without one the response is 403 session_required.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ErrorResponse, ProductResponse
from auth.dependencies import require_session
from core.catalog import ProductCatalog

router = APIRouter(dependencies=[Depends(require_session)], responses={403: {"model": ErrorResponse}})


@router.get("/products", response_model=list[ProductResponse])
def list_products(request: Request) -> list[ProductResponse]:
    catalog: ProductCatalog = request.app.state.catalog
    return [ProductResponse.from_product(p) for p in catalog.list_products()]
