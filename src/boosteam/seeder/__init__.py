from .base import BaseSeeder
from .registry import SeederRegistry

# Import sub-modules to ensure they register themselves when 'seeder' is imported
# Order here doesn't determine execution order (priority does), but importing is required.

# Core (Priority 0-100)
from .core import rbac
from .core import users

# Demo (Priority 500+)
from .demo import roster

__all__ = ["BaseSeeder", "SeederRegistry"]
