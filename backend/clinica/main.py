"""
Application bootstrap.

``bootstrap()`` loads the environment, configures logging, opens the store
(creating or migrating it) and wires repositories into services. The
presentation layer keeps the returned ``ClinicaServices`` and one
``SessionState`` for the logged-in identity.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import sentry_sdk
from dotenv import load_dotenv
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from clinica import __version__
from clinica.core.config import (
    get_environment,
    get_log_dir,
    get_log_json,
    get_log_level,
    get_log_to_file,
    get_sentry_dsn,
    get_sql_echo,
    log_timezone_config,
)
from clinica.core.logging_config import setup_logging
from clinica.core.session_state import SessionState
from clinica.db.live import ChangeNotifier
from clinica.db.migrations import initialize_store
from clinica.db.session import (
    SessionLocal,
    build_sessionmaker,
    database_url_for_logs,
    get_change_notifier,
    get_engine,
)
from clinica.repositories import (
    AppointmentRepository,
    DoctorRepository,
    PharmacyProductRepository,
    PurchaseRepository,
    UserRepository,
)
from clinica.services import (
    AppointmentService,
    CartService,
    DoctorService,
    PharmacyProductService,
    PurchaseService,
    UserService,
)

logger = logging.getLogger(__name__)


@dataclass
class ClinicaServices:
    users: UserService
    doctors: DoctorService
    products: PharmacyProductService
    appointments: AppointmentService
    purchases: PurchaseService
    purchase_repo: PurchaseRepository

    def new_cart(self) -> CartService:
        """A fresh cart for one shopping session."""
        return CartService(self.purchase_repo)


def build_services(db_session: Session, notifier: ChangeNotifier) -> ClinicaServices:
    purchase_repo = PurchaseRepository(db_session, notifier)
    return ClinicaServices(
        users=UserService(UserRepository(db_session)),
        doctors=DoctorService(DoctorRepository(db_session, notifier)),
        products=PharmacyProductService(PharmacyProductRepository(db_session, notifier)),
        appointments=AppointmentService(AppointmentRepository(db_session, notifier)),
        purchases=PurchaseService(purchase_repo),
        purchase_repo=purchase_repo,
    )


@dataclass
class Application:
    engine: Engine
    services: ClinicaServices
    session_state: SessionState
    created: bool


def init_error_tracking() -> bool:
    """Initialize Sentry when SENTRY_DSN is set. Returns whether it was enabled."""
    sentry_dsn = get_sentry_dsn()
    env = get_environment()
    if not sentry_dsn:
        logger.info(
            "Sentry not initialized (SENTRY_DSN not set)",
            extra={"context": {"environment": env}},
        )
        return False

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=__version__,
        integrations=[SqlalchemyIntegration()],
        send_default_pii=False,  # Don't send PII by default
    )
    logger.info(
        "Sentry initialized",
        extra={"context": {"environment": env, "release": __version__}},
    )
    return True


def bootstrap(load_env: bool = True, engine: Optional[Engine] = None) -> Application:
    """Prepare everything the presentation layer needs."""
    if load_env:
        load_dotenv()

    setup_logging(
        log_level=get_log_level(),
        enable_sql_echo=get_sql_echo(),
        log_to_file=get_log_to_file(),
        use_json_format=get_log_json(),
        log_dir=get_log_dir(),
    )
    log_timezone_config()
    init_error_tracking()

    if engine is None:
        engine = get_engine()
        db_session, notifier = SessionLocal(), get_change_notifier()
    else:
        factory = build_sessionmaker(engine)
        notifier = ChangeNotifier(factory)
        db_session = factory()

    logger.info(
        "Opening store",
        extra={"context": {"database_url": database_url_for_logs(str(engine.url))}},
    )
    created = initialize_store(engine)

    services = build_services(db_session, notifier)
    return Application(
        engine=engine, services=services, session_state=SessionState(), created=created
    )
