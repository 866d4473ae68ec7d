from app.models.role import Role  # noqa: F401
from app.models.registry import RegistryElement  # noqa: F401
from app.models.permission import Permission  # noqa: F401
from app.models.user import User  # noqa: F401
