from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from typing import Optional

from inventory.api.dependencies import verify_token
from inventory.database import get_db
from inventory.exceptions import ValidationError
from inventory.services.product_service import ProductService
from inventory.schemas.product import (
    ProductPayload,
    ProductRow,
    ProductMutationResult,
    ProductDeleteResult,
)
from inventory.utils.storage import FileStorage, get_storage

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(verify_token)])


def get_product_service(
    request: Request,
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
) -> ProductService:
    return ProductService(db, storage, origin=str(request.base_url))


@router.get(
    "",
    response_model=list[ProductRow],
    summary="List all products",
    description="All products, most recently updated first."
)
def list_products(
    search: Optional[str] = Query(None, description="Search by product name"),
    service: ProductService = Depends(get_product_service)
):
    """Get every product row."""
    return service.get_all(search)


@router.get(
    "/{product_id}",
    response_model=ProductRow,
    summary="Get product by ID"
)
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """Get a product by ID. Responds 404 if it doesn't exist."""
    return service.get_by_id(product_id)


@router.post(
    "",
    response_model=ProductMutationResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product. Only the new ID is returned."
)
def create_product(
    payload: ProductPayload,
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **price**: Unit price, must be non-negative (defaults to 0)
    - **stock**: Units on hand, a non-negative integer (defaults to 0)
    - **status**: Defaults to "Active"
    """
    product = service.create(payload)
    return ProductMutationResult(productId=product.id)


@router.put(
    "/{product_id}",
    response_model=ProductMutationResult,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: int,
    payload: ProductPayload,
    service: ProductService = Depends(get_product_service)
):
    """
    Update a product.

    If ``image`` changes, the previously uploaded file is removed.
    """
    product = service.update(product_id, payload)
    return ProductMutationResult(productId=product.id)


@router.delete(
    "/{product_id}",
    response_model=ProductDeleteResult,
    summary="Delete a product",
    description="Delete a product by ID together with its uploaded file."
)
def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service)
):
    """Delete a product."""
    if not product_id.isdigit():
        raise ValidationError("Invalid product ID")

    service.delete(int(product_id))
    return ProductDeleteResult(productId=int(product_id))
