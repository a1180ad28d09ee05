"""
Assign custom IDs to problem statements that lack a valid one.

Records are visited oldest first. A stored ID that is valid once trimmed and
upper-cased is normalized in place; anything else gets a fresh ID from the
domain counter.

Usage:
    python migrate_ids.py            # apply
    python migrate_ids.py --dry-run  # report only
"""
import argparse
import asyncio

from sqlalchemy import select

from app.core.database import get_session_local, init_db, close_db
from app.models.problem import ProblemStatement
from app.services.id_allocator import id_allocator, normalize_identifier, is_valid_identifier


async def migrate_identifiers(db, dry_run: bool = False) -> dict:
    """Fix identifiers of every problem statement; returns counts per outcome"""
    result = await db.execute(select(ProblemStatement).order_by(ProblemStatement.created_at))
    problems = list(result.scalars().all())
    print(f"Found {len(problems)} problems")

    counts = {"valid": 0, "normalized": 0, "assigned": 0}

    for problem in problems:
        current = problem.custom_id
        normalized = normalize_identifier(current)

        if current and is_valid_identifier(current):
            counts["valid"] += 1
            continue

        if is_valid_identifier(normalized):
            new_id = normalized
            counts["normalized"] += 1
        elif dry_run:
            print(f"  {problem.title}: {current or 'NO_ID'} -> (new {problem.domain.value} ID)")
            counts["assigned"] += 1
            continue
        else:
            new_id = await id_allocator.allocate(db, problem.domain)
            counts["assigned"] += 1

        print(f"  {problem.title}: {current or 'NO_ID'} -> {new_id}")
        if not dry_run:
            problem.custom_id = new_id
            await db.commit()

    if dry_run:
        await db.rollback()

    print(f"Valid: {counts['valid']}, normalized: {counts['normalized']}, assigned: {counts['assigned']}")
    return counts


async def main(dry_run: bool):
    await init_db()
    session_local = get_session_local()
    try:
        async with session_local() as db:
            await migrate_identifiers(db, dry_run=dry_run)
    finally:
        await close_db()


def main_entry():
    parser = argparse.ArgumentParser(description="Assign custom IDs to legacy problem statements")
    parser.add_argument("--dry-run", action="store_true", help="report changes without writing them")
    args = parser.parse_args()
    asyncio.run(main(args.dry_run))


if __name__ == "__main__":
    main_entry()
