# avocado_api/modules/sales/seed.py

import json
from importlib import resources
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from .models import SalesRecordCreateInternal
from .repository import SalesRecordRepository

BUNDLED_SEED_FILE = "avocado-sales.json"


def load_seed_records(path: Optional[str] = None) -> List[SalesRecordCreateInternal]:
    """Reads the seed dataset, from ``path`` or the copy bundled with the package."""
    if path:
        raw = Path(path).read_text(encoding="utf-8")
        source = path
    else:
        raw = resources.files("avocado_api.data").joinpath(BUNDLED_SEED_FILE).read_text(encoding="utf-8")
        source = f"bundled {BUNDLED_SEED_FILE}"
    records = [SalesRecordCreateInternal.model_validate(item) for item in json.loads(raw)]
    logger.debug(f"Loaded {len(records)} seed records from {source}.")
    return records


async def seed_database(
    repository: SalesRecordRepository,
    records: Optional[Sequence[SalesRecordCreateInternal]] = None,
    path: Optional[str] = None,
) -> bool:
    """Replaces the whole collection with the seed dataset.

    Failures are logged and reported through the return value only; the
    caller is a startup task nobody waits on.
    """
    try:
        if records is None:
            records = load_seed_records(path)
        inserted = await repository.replace_all(records)
        await repository.create_indexes()
    except Exception as e:
        logger.opt(exception=e).error(f"Failed to seed database: {e}")
        return False
    logger.success(f"Database seeded successfully with {inserted} records!")
    return True
