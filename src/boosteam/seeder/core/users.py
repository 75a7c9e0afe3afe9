from boosteam.security.auth.models import User
from boosteam.security.auth.service import AuthService
from boosteam.security.rbac.catalog import ADMIN_ROLE
from boosteam.security.rbac.models import Role
from boosteam.seeder.base import BaseSeeder
from boosteam.seeder.registry import SeederRegistry

@SeederRegistry.register
class AdminUserSeeder(BaseSeeder):
    """Seeds the development admin account when ADMIN_PASSWORD is configured."""
    priority = 20

    def run(self):
        if not self.settings.ADMIN_PASSWORD:
            self.log("ADMIN_PASSWORD not set. Skipping.")
            return

        username = self.settings.ADMIN_USERNAME
        existing = self.session.query(User).filter_by(username=username).first()
        if existing:
            self.log(f"User '{username}' already exists. Skipping.")
            return existing

        admin_role = self.session.query(Role).filter_by(name=ADMIN_ROLE).first()
        if admin_role is None:
            self.log("Admin role missing; run the RBAC bootstrap first. Skipping.")
            return

        service = AuthService(
            self.session,
            password_min_length=self.settings.PASSWORD_MIN_LENGTH,
            password_iterations=self.settings.PASSWORD_HASH_ITERATIONS,
        )
        user = service.register_user(
            username=username,
            password=self.settings.ADMIN_PASSWORD,
            email=self.settings.ADMIN_EMAIL,
            default_role=None,
        )
        user.roles = [admin_role]
        self.log(f"Created user '{username}' with role '{ADMIN_ROLE}'.")
        return user
