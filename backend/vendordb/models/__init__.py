from .enums import UserRole, Availability, OrderStatus, ChangeType
from .auth import User
from .catalog import Item
from .locations import Location, LocationItem
from .orders import Order, OrderItem
from .audit import ChangeLog

__all__ = [
    'UserRole', 'Availability', 'OrderStatus', 'ChangeType',
    'User',
    'Item',
    'Location', 'LocationItem',
    'Order', 'OrderItem',
    'ChangeLog',
]
