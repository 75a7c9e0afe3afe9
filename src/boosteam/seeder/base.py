from abc import ABC, abstractmethod
from typing import Optional
from sqlalchemy.orm import Session
from faker import Faker
import logging

from boosteam.config import Settings, get_settings

logger = logging.getLogger(__name__)

class BaseSeeder(ABC):
    """
    Abstract base class for all data seeders.

    Attributes:
        priority (int): Execution order priority (lower runs first).
                        Core data (permissions, roles, accounts) uses 0-100.
                        Demo data uses 500+.
        demo (bool): Demo seeders only run when explicitly requested.
    """
    priority: int = 100
    demo: bool = False

    def __init__(
        self,
        session: Session,
        fake: Optional[Faker] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.fake = fake or Faker()
        self.settings = settings or get_settings()

    @abstractmethod
    def run(self):
        """Execute the seeding logic."""
        pass

    def log(self, message: str):
        """Helper to log seeding progress."""
        logger.info(f"[{self.__class__.__name__}] {message}")
