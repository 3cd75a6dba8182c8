#app/services/setup.py
import logging

from app.core.config import DEFAULT_ADMIN_PASSWORD, settings
from app.core.security import validate_password
from app.db.kv import KVStore
from app.repositories.taxonomy import PollutionTypeRepository, SectorRepository
from app.repositories.users import UserRepository
from app.services.auth import AuthService

logger = logging.getLogger(__name__)

DEFAULT_POLLUTION_TYPES = [
    ("Bad Smell / Odor", "Unpleasant odors from various sources including waste, industrial processes, or sewage"),
    ("Smoke", "Visible smoke from burning materials, vehicles, or industrial emissions"),
    ("Noise Pollution", "Excessive noise from construction, traffic, machinery, or other sources"),
    ("Water Pollution", "Contamination of water bodies including rivers, lakes, groundwater, or drainage systems"),
    ("Air Pollution", "Contamination of air quality from industrial emissions, vehicle exhaust, or other sources"),
    ("Waste / Litter", "Improper disposal of solid waste, illegal dumping, or excessive littering"),
    ("Chemical Pollution", "Release of hazardous chemicals into the environment"),
    ("Other", "Other types of pollution not covered by the above categories"),
]

DEFAULT_SECTORS = [
    ("Sector 1", "Residential and commercial area in the northern part of the city"),
    ("Sector 2", "Mixed residential and light industrial area"),
    ("Sector 3", "Central business district and commercial area"),
    ("Sector 4", "Industrial and manufacturing zone"),
    ("Sector 5", "Residential area in the southern part of the city"),
]


def ensure_admin_account(kv: KVStore) -> None:
    email = settings.admin_email
    existing = UserRepository(kv).get_by_email(email)
    if existing:
        if not existing.is_admin:
            logger.warning(f"User {email} exists but is not admin. This needs manual intervention.")
        else:
            logger.info("Admin account already exists")
        return

    check = validate_password(settings.admin_password)
    if not check.valid:
        raise ValueError(f"Default admin password is invalid: {check.error}")

    AuthService(kv).register(
        email, settings.admin_password, settings.admin_name, settings.admin_phone, is_admin=True,
    )
    logger.info(f"Admin account created: {email}")
    if settings.admin_password == DEFAULT_ADMIN_PASSWORD:
        logger.warning("Using default admin password! Set ADMIN_PASSWORD and change it after first login.")


def seed_default_data(kv: KVStore) -> None:
    types = PollutionTypeRepository(kv)
    if not types.get_all():
        with kv.atomic():
            for name, description in DEFAULT_POLLUTION_TYPES:
                types.create({"name": name, "description": description})
        logger.info(f"Created {len(DEFAULT_POLLUTION_TYPES)} pollution types")

    sectors = SectorRepository(kv)
    if not sectors.get_all():
        with kv.atomic():
            for name, description in DEFAULT_SECTORS:
                sectors.create({"name": name, "description": description})
        logger.info(f"Created {len(DEFAULT_SECTORS)} sectors")


def initialize(kv: KVStore) -> None:
    logger.info("Initializing server setup...")
    ensure_admin_account(kv)
    seed_default_data(kv)
    logger.info("Server setup completed successfully")
