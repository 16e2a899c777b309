"""Aggregate model imports for Alembic auto-detection."""

from poultry_api.models.user import User, UserRole  # noqa: F401
from poultry_api.models.farm import Farm  # noqa: F401
from poultry_api.models.house import House  # noqa: F401
from poultry_api.models.breed import Breed  # noqa: F401

# Production
from poultry_api.models.batch import Batch  # noqa: F401
from poultry_api.models.daily_record import DailyRecord  # noqa: F401
from poultry_api.models.egg_production import EggProduction  # noqa: F401

# Sales
from poultry_api.models.customer import Customer  # noqa: F401
from poultry_api.models.order import Order, OrderItem, OrderStatusHistory  # noqa: F401
from poultry_api.models.payment import Payment  # noqa: F401
