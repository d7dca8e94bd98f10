"""
Initialize database and seed the landing page content.

Run this script once to set up the database:
    python init_db.py
"""

from linkrotator.config import settings
from linkrotator.database import Base, build_engine, build_session_factory
from linkrotator.models import LandingContent

DEFAULT_LANDING_TITLE = "Discover what you are looking for"
DEFAULT_LANDING_DESCRIPTION = "Explore popular related searches and find the best results on the web."


def init_database(engine):
    """Create all database tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Database tables created successfully!")


def seed_landing_content(session_factory):
    """Create the singleton landing content row"""
    db = session_factory()

    try:
        if db.query(LandingContent).first():
            print("Landing content already exists.")
            print("Skipping seed.")
            return

        db.add(LandingContent(title=DEFAULT_LANDING_TITLE, description=DEFAULT_LANDING_DESCRIPTION))
        db.commit()
        print("Landing content created.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("=" * 50)
    print(f"{settings.SITE_NAME} - Database Initialization")
    print("=" * 50)

    engine = build_engine(settings.DATABASE_URL)
    init_database(engine)
    seed_landing_content(build_session_factory(engine))

    print("\nDatabase initialization complete!")
    print("\nYou can now start the server with:")
    print("    uvicorn linkrotator.main:app --reload")
