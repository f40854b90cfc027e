from app.db.session import Base, engine
from app.models import PriceAlert, PriceAlertNotification  # noqa: F401


def create_tables():
    """Create database tables."""
    Base.metadata.create_all(bind=engine)


def init_db():
    """Initialize database (create tables)."""
    create_tables()
