import logging

from sqlalchemy.orm import Session

from sortie.core.config import settings
from sortie.core.constants import ROLE_ADMIN
from sortie.core.logging import setup_logging
from sortie.core.security import hash_password
from sortie.database.session import SessionLocal, init_db
from sortie.models.user import User

logger = logging.getLogger(__name__)


def run(email: str = None, password: str = None):
    email = email or settings.ADMIN_EMAIL
    password = password or settings.ADMIN_PASSWORD

    init_db()
    db: Session = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == email).first()
        if admin:
            logger.info("Admin %s already exists", email)
            return admin

        admin = User(
            email=email,
            password_hash=hash_password(password),
            role=ROLE_ADMIN,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)

        logger.info("Admin %s created", email)
        return admin
    finally:
        db.close()


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    run()
