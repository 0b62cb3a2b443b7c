"""
JSON Import Script for Tracking Plans

Usage:
    python scripts/import_tracking_plans.py <path-to-json>

JSON Format:
    A list of tracking plans, or an object with a "tracking_plans" list:
    [{"name": ..., "description": ..., "events": [{"name": ..., "description": ...,
      "properties": [...], "additionalProperties": false}]}]

Every plan goes through the same reconciliation as the API, one plan per
transaction: a plan that conflicts with the catalog is skipped and the rest
are still imported.
"""

import sys
import json
import asyncio
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from app.core.config import settings
from app.core.database import Database
from app.core.errors import ErrorKind
from app.repositories.sqlalchemy import SqlAlchemyUnitOfWork
from app.schemas.tracking_plan import TrackingPlanCreate
from app.services.tracking_plans import TrackingPlanService


def load_plans(file_path: Path) -> list[dict]:
    with open(file_path, 'r', encoding='utf-8') as f:
        document = json.load(f)

    if isinstance(document, dict):
        document = document.get("tracking_plans", [])
    if not isinstance(document, list):
        print("Error: JSON must be a list of tracking plans")
        sys.exit(1)
    return document


async def import_plans(file_path: str) -> dict[str, int]:
    """
    Import tracking plans from a JSON file

    Args:
        file_path: Path to JSON file

    Returns:
        Counters by outcome
    """
    file_path = Path(file_path)

    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    print(f"Starting import from: {file_path}")

    database = Database.from_settings(settings)
    totals = {"created": 0, "conflicts": 0, "invalid": 0, "failed": 0}

    try:
        for i, raw in enumerate(load_plans(file_path), 1):
            try:
                plan = TrackingPlanCreate.model_validate(raw)
            except ValidationError as e:
                print(f"Invalid plan #{i}: {e.error_count()} validation error(s)")
                totals["invalid"] += 1
                continue

            service = TrackingPlanService(SqlAlchemyUnitOfWork(database.session_factory))
            result = await service.create_tracking_plan(plan)

            if result.success:
                totals["created"] += 1
                print(f"Created '{plan.name}' (id={result.data.id})")
            elif result.kind in (ErrorKind.CONFLICT, ErrorKind.ALREADY_EXISTS):
                totals["conflicts"] += 1
                print(f"Skipped '{plan.name}': {result.message or result.error}")
            else:
                totals["failed"] += 1
                print(f"Failed '{plan.name}': {result.message or result.error}")
    finally:
        await database.dispose()

    print("\n" + "=" * 50)
    print("Import completed!")
    print(f"Created: {totals['created']}")
    print(f"Conflicts: {totals['conflicts']}")
    print(f"Invalid: {totals['invalid']}")
    print(f"Failed: {totals['failed']}")
    print("=" * 50)

    return totals


def main():
    if len(sys.argv) != 2:
        print("Usage: python scripts/import_tracking_plans.py <path-to-json>")
        sys.exit(1)

    totals = asyncio.run(import_plans(sys.argv[1]))
    if totals["failed"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
