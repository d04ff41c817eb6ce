"""
Bootstrap data and maintenance commands.

    python -m core.seed video          # demo video, if no active video exists
    python -m core.seed admin          # SUPER_ADMIN from Vault tasksafe/bootstrap
    python -m core.seed cleanup-links  # delete expired, never-used magic links
"""

import argparse
import logging
import sys

from api.app import build_services
from auth.config import AuthConfig
from auth.database import AdminUserDatabase
from auth.passwords import hash_password
from auth.types import AdminUser, Role
from clients.email_client import LogOnlyEmailClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_bootstrap_admin, get_database_url, get_valkey_url
from core.models import Video, VideoCreate

logger = logging.getLogger(__name__)

DEMO_VIDEO = VideoCreate(
    title="Use of Aircraft Wheel Chocks and Safety Cones",
    description=(
        "This video demonstrates the safe use of aircraft wheel chocks and the "
        "correct positioning of safety cones around aircraft."
    ),
    thumbnail_url=(
        "https://images.unsplash.com/photo-1436491865332-7a61a109cc05"
        "?auto=format&fit=crop&w=800&h=450"
    ),
    video_url="https://vimeo.com/887830582/45ac7f1f05",
    duration="8:45",
    category="Aircraft Safety Training",
)


def seed_demo_video(videos) -> tuple[Video, bool]:
    """
    Insert the demo video unless an active video already exists.

    Args:
        videos: VideoService

    Returns:
        (video, created)
    """
    existing = videos.get_latest_active()
    if existing is not None:
        return existing, False
    return videos.insert(DEMO_VIDEO), True


def seed_super_admin(
    auth_db: AdminUserDatabase,
    email: str,
    password: str,
    rounds: int = 12,
) -> tuple[AdminUser, bool]:
    """
    Create the initial SUPER_ADMIN unless that email is already registered.

    Returns:
        (admin, created)
    """
    email = email.lower().strip()
    existing = auth_db.get_by_email(email)
    if existing is not None:
        return existing, False
    admin = auth_db.create(
        email=email,
        password_hash=hash_password(password, rounds),
        role=Role.SUPER_ADMIN.value,
        company_tag=None,
    )
    return admin, True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m core.seed", description=__doc__.strip().splitlines()[0])
    parser.add_argument("command", choices=["video", "admin", "cleanup-links"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)-5s [%(name)s] %(message)s")

    config = AuthConfig.from_env()
    postgres = PostgresClient(get_database_url())

    try:
        if args.command == "admin":
            bootstrap = get_bootstrap_admin()
            admin, created = seed_super_admin(
                AdminUserDatabase(postgres),
                bootstrap["email"],
                bootstrap["password"],
                config.password_hash_rounds,
            )
            logger.info(f"Super admin {admin.email} {'created' if created else 'already exists'}")
            return 0

        valkey = ValkeyClient(get_valkey_url())
        try:
            services = build_services(config, postgres, valkey, LogOnlyEmailClient(config.email_from))
            if args.command == "video":
                video, created = seed_demo_video(services["video"])
                logger.info(f"Video {video.id} {'seeded' if created else 'already exists'}")
            else:
                removed = services["access"].cleanup_expired_links()
                logger.info(f"Removed {removed} expired magic links")
        finally:
            valkey.close()
        return 0
    finally:
        PostgresClient.close_all_pools()


if __name__ == "__main__":
    sys.exit(main())
