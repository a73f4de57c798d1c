#!/usr/bin/env python
"""Initialize the wishlist_items table in the configured database."""
import asyncio

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from storefront.db.connection import (
    create_engine,
    create_tables,
    get_database_url,
    sanitize_database_url,
)
from storefront.main import validate_environment


async def init_db() -> None:
    database_url = get_database_url()
    engine = create_engine(database_url)
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()
    print(f"✓ Wishlist tables created in {sanitize_database_url(database_url)}")


if __name__ == "__main__":
    validate_environment()
    asyncio.run(init_db())
