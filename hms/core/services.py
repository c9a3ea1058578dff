# hms/core/services.py
"""
Process-wide collaborators, built once per application instance.

`AppServices.build()` runs in the FastAPI lifespan; `shutdown()` runs when
the server stops. Request handlers reach them through dependencies in
hms.dependencies.services, never through module globals.
"""

import logging
from dataclasses import dataclass

from hms.core.config import Settings
from hms.core.database import Database
from hms.core.redis import LoginThrottle
from hms.services.audit_service import AuditRecorder
from hms.services.live_updates import LiveUpdateHub
from hms.services.paystack_client import PaystackClient

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    settings: Settings
    database: Database
    audit: AuditRecorder
    live_updates: LiveUpdateHub
    payments: PaystackClient
    login_throttle: LoginThrottle

    @classmethod
    def build(cls, settings: Settings) -> "AppServices":
        database = Database(settings)
        if settings.auto_create_tables:
            database.create_all()

        return cls(
            settings=settings,
            database=database,
            audit=AuditRecorder(database.session_factory),
            live_updates=LiveUpdateHub(),
            payments=PaystackClient(settings),
            login_throttle=LoginThrottle.from_settings(settings),
        )

    async def shutdown(self) -> None:
        logger.info("Shutting down: closing live-update sockets and connections")
        await self.live_updates.close_all()
        self.payments.close()
        self.login_throttle.close()
        self.database.dispose()
