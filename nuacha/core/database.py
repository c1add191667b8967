import uuid
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool
from nuacha.config import settings

# SQLite connections are not shared between event loops
engine_options = {"echo": settings.DATABASE_ECHO, "future": True}
if settings.DATABASE_URL.startswith("sqlite"):
    engine_options["poolclass"] = NullPool

# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **engine_options)

# Create async session
async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

# Base class for models
Base = declarative_base()

async def init_models():
    """Create all tables registered on Base"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

def generate_uuid() -> str:
    """Primary key default for all tables"""
    return str(uuid.uuid4())
