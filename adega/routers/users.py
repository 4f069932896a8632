"""
User registry router
Records only, this service does not authenticate
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List
import logging

from adega.database import get_db
from adega.crud.user import crud_user
from adega.exceptions import Conflict, NotFound
from adega.schemas.user import UserCreate, UserUpdate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
async def list_users(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return crud_user.get_multi(db, skip=skip, limit=limit)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    user = crud_user.get(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """Create user, password is stored as a bcrypt hash"""
    if crud_user.get_by_email(db, user.email):
        raise Conflict(f"User with email {user.email} already exists")

    db_user = crud_user.create_with_password(db, obj_in=user.model_dump())
    logger.info(f"User {db_user.id} created with role {db_user.role}")
    return db_user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: int, user: UserUpdate, db: Session = Depends(get_db)):
    if not crud_user.get(db, user_id):
        raise NotFound("User not found")

    data = user.model_dump(exclude_unset=True)
    if data.get("email"):
        other = crud_user.get_by_email(db, data["email"])
        if other and other.id != user_id:
            raise Conflict(f"User with email {data['email']} already exists")

    return crud_user.update_with_password(db, id=user_id, obj_in=data)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, db: Session = Depends(get_db)):
    if not crud_user.remove(db, id=user_id):
        raise NotFound("User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
