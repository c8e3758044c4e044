"""Products API router."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from shop_service.auth import get_current_admin
from shop_service.database import get_db
from shop_service.dependencies import get_catalog_service, get_image_store
from shop_service.models import Admin
from shop_service.schemas import MessageResponse, ProductCreate, ProductResponse, ProductUpdate
from shop_service.services.catalog_service import CatalogService
from shop_service.uploads import ImageRejected, ImageStore

router = APIRouter(prefix="/api/products", tags=["products"])


async def _store_image(image: Optional[UploadFile], image_store: ImageStore) -> Optional[str]:
    """Save an uploaded image; an absent or empty file field means no image."""
    if image is None or not image.filename:
        return None
    try:
        return await image_store.save(image)
    except ImageRejected as e:
        raise HTTPException(status_code=400, detail=str(e))


def _discard(image_ref: Optional[str], image_store: ImageStore) -> None:
    if image_ref is not None:
        image_store.discard(image_ref)


def _validated(schema, **fields):
    """Build a schema from form fields, reporting failures like body validation."""
    try:
        return schema(**fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


@router.get("", response_model=List[ProductResponse])
async def list_products(
    db: Session = Depends(get_db),
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    """List all products."""
    return catalog_service.list_products(db)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    name: str = Form(...),
    name_si: str = Form(..., alias="nameSi"),
    description: str = Form(...),
    description_si: str = Form(..., alias="descriptionSi"),
    price: float = Form(...),
    stock: int = Form(...),
    category: str = Form(...),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
    image_store: ImageStore = Depends(get_image_store)
):
    """Create a product from a multipart form with an optional image - admin only."""
    data = _validated(
        ProductCreate,
        name=name,
        name_si=name_si,
        description=description,
        description_si=description_si,
        price=price,
        stock=stock,
        category=category,
    )
    data.image = await _store_image(image, image_store)
    try:
        return catalog_service.create_product(db, data)
    except Exception:
        _discard(data.image, image_store)
        raise


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str = Path(..., description="Product ID"),
    name: Optional[str] = Form(None),
    name_si: Optional[str] = Form(None, alias="nameSi"),
    description: Optional[str] = Form(None),
    description_si: Optional[str] = Form(None, alias="descriptionSi"),
    price: Optional[float] = Form(None),
    stock: Optional[int] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    catalog_service: CatalogService = Depends(get_catalog_service),
    image_store: ImageStore = Depends(get_image_store)
):
    """Partially update a product, optionally replacing its image - admin only."""
    fields = {
        "name": name,
        "name_si": name_si,
        "description": description,
        "description_si": description_si,
        "price": price,
        "stock": stock,
        "category": category,
    }
    data = _validated(ProductUpdate, **{k: v for k, v in fields.items() if v is not None})

    if catalog_service.get_product(db, product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")

    image_ref = await _store_image(image, image_store)
    if image_ref is not None:
        data.image = image_ref

    try:
        product = catalog_service.update_product(db, product_id, data)
    except Exception:
        _discard(image_ref, image_store)
        raise
    if product is None:
        # Deleted since the check above
        _discard(image_ref, image_store)
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: str = Path(..., description="Product ID"),
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    catalog_service: CatalogService = Depends(get_catalog_service)
):
    """Delete a product - admin only."""
    if not catalog_service.delete_product(db, product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product deleted"}
