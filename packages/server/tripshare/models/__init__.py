# SQLModel definitions, imported here so create_all sees every table.
from .base import UUIDMixin, TimestampMixin, PermissionFlagsMixin  # noqa: F401
from .user import User  # noqa: F401
from .companion import TravelCompanion  # noqa: F401
from .trip import Trip  # noqa: F401
from .items import Flight, Hotel, Transportation, CarRental, Event  # noqa: F401
from .sharing import TripCompanion, ItemCompanion, CompanionPermission  # noqa: F401
