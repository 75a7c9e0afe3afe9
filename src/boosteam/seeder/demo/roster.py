from boosteam.models.roster import PLAYER_ROLES
from boosteam.security.auth.models import User
from boosteam.security.auth.service import AuthService
from boosteam.services.roster_service import RosterService
from boosteam.seeder.base import BaseSeeder
from boosteam.seeder.registry import SeederRegistry

DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo-password"

@SeederRegistry.register
class DemoRosterSeeder(BaseSeeder):
    """Seeds a demo account with a randomly generated roster."""
    priority = 500
    demo = True
    player_count = 12

    def run(self):
        existing = self.session.query(User).filter_by(username=DEMO_USERNAME).first()
        if existing:
            self.log(f"User '{DEMO_USERNAME}' already exists. Skipping.")
            return

        service = AuthService(
            self.session,
            password_min_length=self.settings.PASSWORD_MIN_LENGTH,
            password_iterations=self.settings.PASSWORD_HASH_ITERATIONS,
        )
        user = service.register_user(
            username=DEMO_USERNAME,
            password=DEMO_PASSWORD,
            email=self.fake.unique.email(),
        )

        roster = RosterService(self.session, user)
        tiers = ["S", "A", "B", "C", "D"]
        for _ in range(self.player_count):
            roster.add_player(
                name=self.fake.unique.first_name(),
                role=self.fake.random_element(PLAYER_ROLES),
                tier=self.fake.random_element(tiers),
            )
        self.log(f"Created '{DEMO_USERNAME}' with {self.player_count} players.")
