from payitem_sync.models.business import Business, UserBusiness
from payitem_sync.models.pay_item import PayItem
from payitem_sync.models.user import User

__all__ = ["Business", "PayItem", "User", "UserBusiness"]
