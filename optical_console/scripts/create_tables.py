"""
Create the lens tables (lenses, lens_movements, lens_costings).

Run locally:
  python -m optical_console.scripts.create_tables

It uses the same DATABASE_* env vars as the API (dotenv supported by core.config).
"""

import asyncio

from optical_console.core.config import settings
from optical_console.core.log_config import configure_logging
from optical_console.db.database import create_db_and_tables


async def main() -> None:
    logger = configure_logging(settings.log_level)
    await create_db_and_tables()
    logger.info("[create_tables] done.")


if __name__ == "__main__":
    asyncio.run(main())
