"""
Seed the dish store from a JSON file.

Usage:
    python -m dishmanager.scripts.seed_dishes [path/to/dishes.json]

Replaces every existing dish with the file's contents (a list of
{dishId, dishName, imageUrl, isPublished?} objects). Seeding writes straight
to the store and does not broadcast.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter
from sqlalchemy import delete

from dishmanager.database import async_session_factory, dispose_engine, init_models
from dishmanager.models.dish import Dish
from dishmanager.schemas.dish import DishCreate

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[2] / "data" / "dishes.json"


def load_dishes(path: Path) -> List[DishCreate]:
    """Parse and validate the seed file; every entry needs the three required fields."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    entries = []
    for index, entry in enumerate(TypeAdapter(List[DishCreate]).validate_python(raw)):
        fields = {
            name: (getattr(entry, name) or "").strip()
            for name in ("dish_id", "dish_name", "image_url")
        }
        if not all(fields.values()):
            raise ValueError(f"Entry {index} in {path} is missing dishId, dishName or imageUrl")
        entries.append(entry.model_copy(update=fields))
    return entries


async def seed(path: Path) -> int:
    entries = load_dishes(path)
    await init_models()
    async with async_session_factory() as session:
        result = await session.execute(delete(Dish))
        logger.info("Cleared %d existing dishes", result.rowcount or 0)
        session.add_all(
            Dish(
                dish_id=entry.dish_id,
                dish_name=entry.dish_name,
                image_url=entry.image_url,
                is_published=bool(entry.is_published),
            )
            for entry in entries
        )
        await session.commit()
    logger.info("Seeded %d dishes from %s", len(entries), path)
    return len(entries)


async def _run(path: Path) -> None:
    try:
        await seed(path)
    finally:
        await dispose_engine()


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = sys.argv[1:] if argv is None else argv
    path = Path(args[0]) if args else DEFAULT_DATA_FILE
    try:
        asyncio.run(_run(path))
    except Exception as e:
        logger.error("Error seeding dishes: %s", str(e), exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
