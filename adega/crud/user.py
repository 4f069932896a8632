"""
User registry. Plain records: passwords are stored hashed and nothing
here authenticates anyone.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session
from passlib.context import CryptContext
from typing import Any, Dict, Optional

from adega.models import User
from adega.crud.base import CRUDBase

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class CRUDUser(CRUDBase[User]):
    def __init__(self):
        super().__init__(User)

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return db.execute(stmt).scalar_one_or_none()

    def create_with_password(self, db: Session, *, obj_in: Dict[str, Any]) -> User:
        data = dict(obj_in)
        data["password_hash"] = get_password_hash(data.pop("password"))
        return self.create(db, obj_in=data)

    def update_with_password(self, db: Session, *, id: int, obj_in: Dict[str, Any]) -> Optional[User]:
        data = dict(obj_in)
        if data.get("password"):
            data["password_hash"] = get_password_hash(data.pop("password"))
        data.pop("password", None)
        return self.update(db, id=id, obj_in=data)


crud_user = CRUDUser()
