# backend/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv

from config import settings

load_dotenv()

# 1. Adres bazy z konfiguracji (zmienna DATABASE_URL lub lokalny SQLite)
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. SQLAlchemy wymaga schematu postgresql:// zamiast postgres://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Konfiguracja zależna od bazy
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False} # Tylko dla SQLite
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # Register every mapped table on Base.metadata before creating them
    import models.product  # noqa: F401
    import models.stock  # noqa: F401
    import models.attachment  # noqa: F401
    import models.sequence  # noqa: F401
    import models.log  # noqa: F401
    Base.metadata.create_all(bind=engine)
