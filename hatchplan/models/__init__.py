from hatchplan.models.user import User, UserRole, admin_required
from hatchplan.models.run import Run, RunMode
from hatchplan.models.batch import Batch
from hatchplan.models.settings import Settings

__all__ = [
    "User",
    "UserRole",
    "admin_required",
    "Run",
    "RunMode",
    "Batch",
    "Settings",
]
