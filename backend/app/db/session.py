from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings


settings = get_settings()

engine_options: dict[str, object] = {"future": True, "pool_pre_ping": True}
if not settings.database_url.startswith("sqlite"):
    # Keep the pool small and recycle often on hosted Postgres plans.
    engine_options.update(pool_size=5, max_overflow=5, pool_recycle=300)

engine = create_engine(settings.database_url, **engine_options)

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)
