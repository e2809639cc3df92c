"""
Database initialization script.
"""
import logging
from tripsettle.db.session import init_db

# Import all models so SQLAlchemy can register them
from tripsettle.models import (  # noqa: F401
    User, Trip, TripParticipant, Expense, ExpenseDetail, SettlementPayment
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Initializing database...")
    init_db()
    logger.info("Database initialized successfully!")
