"""
Product catalog router
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from adega.database import get_db
from adega.crud.product import crud_product
from adega.services import registry
from adega.schemas.product import ProductCreate, ProductUpdate, ProductResponse

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductResponse])
async def list_products(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return crud_product.get_multi(db, skip=skip, limit=limit)


@router.get("/count")
async def count_products(db: Session = Depends(get_db)):
    return {"totalProducts": crud_product.count(db)}


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: Session = Depends(get_db)):
    return registry.get_product(db, product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, db: Session = Depends(get_db)):
    return crud_product.create(db, obj_in=product.model_dump())


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: int, product: ProductUpdate, db: Session = Depends(get_db)):
    """
    Partial update
    Price changes do not touch existing consignment items or counts
    """
    return registry.update_product(db, product_id, product.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, db: Session = Depends(get_db)):
    registry.delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
