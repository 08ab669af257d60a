"""
Merchant resolution for the signed-in user
"""
from typing import Optional

from sqlalchemy.orm import Session

from oms_console.exceptions import MerchantNotFoundError
from oms_console.models import User


def get_merchant_id(db: Session, user_id: str) -> Optional[int]:
    """Merchant id of the user, or None when the user is unknown or unassigned."""
    row = db.query(User.merchant_id).filter(User.user_id == str(user_id)).first()
    return row[0] if row else None


def require_merchant_id(db: Session, user_id: str) -> int:
    """Merchant id of the user; raises MerchantNotFoundError when there is none."""
    merchant_id = get_merchant_id(db, user_id)
    if merchant_id is None:
        raise MerchantNotFoundError()
    return merchant_id
