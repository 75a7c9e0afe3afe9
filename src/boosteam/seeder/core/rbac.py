from boosteam.security.rbac.bootstrap import seed_default_roles_and_permissions
from boosteam.seeder.base import BaseSeeder
from boosteam.seeder.registry import SeederRegistry

@SeederRegistry.register
class RBACSeeder(BaseSeeder):
    """Seeds the permission registry and the admin/user/viewer roles."""
    priority = 10  # Everything else references roles

    def run(self):
        result = seed_default_roles_and_permissions(
            self.session, mode=self.settings.BOOTSTRAP_MODE
        )
        if result.changed:
            self.log(
                f"Created {result.permissions_created} permissions, "
                f"{result.roles_created} roles."
            )
        else:
            self.log("Permission registry already seeded. Skipping.")
