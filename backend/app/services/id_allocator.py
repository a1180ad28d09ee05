"""
Identifier Allocator - domain-prefixed custom IDs for problem statements

Every problem statement carries a short human-facing identifier such as
AIM001 or IOT002: a 3-letter domain prefix followed by a zero-padded
sequence number scoped to that domain.

The last number handed out per domain lives in the domain_sequences table
and is advanced with a single atomic UPDATE ... RETURNING, so two writers
never read the same value. The unique index on problem_statements.custom_id
stays the final guard; ProblemService retries on a collision there.
"""

import enum
from typing import Optional, Union

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.problem import ProblemStatement, DomainSequence, CUSTOM_ID_PATTERN
from app.core.exceptions import IdentifierConflictError
from app.core.logging_config import logger
from app.core.config import settings


DOMAIN_PREFIXES = {
    "AI & Machine Learning": "AIM",
    "IoT & Embedded Systems": "IOT",
    "Cloud Computing": "CLD",
    "Web & Mobile Applications": "WEB",
    "Cybersecurity & Blockchain": "CYS",
    "Data Science & Analytics": "DAT",
    "Networking & Communication": "NET",
    "Mechanical / ECE Projects": "MEC",
}

FALLBACK_PREFIX = "GEN"
SEQUENCE_WIDTH = 3
MAX_SEQUENCE = 10 ** SEQUENCE_WIDTH - 1


def domain_key(domain: Union[str, enum.Enum]) -> str:
    """Plain string value of a domain (enum members are unwrapped)"""
    if isinstance(domain, enum.Enum):
        return domain.value
    return str(domain)


def prefix_for(domain: Union[str, enum.Enum, None]) -> str:
    """Prefix for a domain, GEN when the domain is not mapped"""
    if domain is None:
        return FALLBACK_PREFIX
    return DOMAIN_PREFIXES.get(domain_key(domain), FALLBACK_PREFIX)


def format_identifier(prefix: str, sequence: int) -> str:
    """AIM + 7 -> AIM007"""
    if not 0 < sequence <= MAX_SEQUENCE:
        raise ValueError(f"sequence {sequence} does not fit in {SEQUENCE_WIDTH} digits")
    return f"{prefix}{str(sequence).zfill(SEQUENCE_WIDTH)}"


def normalize_identifier(value: Optional[str]) -> Optional[str]:
    """Trim and upper-case a caller-supplied identifier; blank becomes None"""
    if value is None:
        return None
    value = str(value).strip().upper()
    return value or None


def is_valid_identifier(value: Optional[str]) -> bool:
    return bool(value) and CUSTOM_ID_PATTERN.match(value) is not None


def needs_identifier(value: Optional[str]) -> bool:
    """True when a record must have an identifier allocated for it"""
    return not is_valid_identifier(normalize_identifier(value))


class IdentifierAllocator:
    """
    Hands out the next free identifier for a domain.

    allocate() must run inside the transaction that inserts the record, so
    that a rollback of the insert also rolls back the counter advance.
    """

    def __init__(self, max_probes: Optional[int] = None):
        self.max_probes = max_probes or settings.ID_ALLOCATION_MAX_PROBES

    async def allocate(self, db: AsyncSession, domain: Union[str, enum.Enum]) -> str:
        """Return a custom ID for a new record in the given domain"""
        key = domain_key(domain)
        prefix = prefix_for(key)

        candidate = None
        for probe in range(1, self.max_probes + 1):
            sequence = await self.next_sequence(db, key)
            if sequence > MAX_SEQUENCE:
                logger.error(
                    f"Identifier sequence for '{key}' passed {format_identifier(prefix, MAX_SEQUENCE)}",
                    extra={"event_type": "id_allocation", "domain": key, "sequence": sequence}
                )
                raise IdentifierConflictError(key, probe, candidate, exhausted=True)

            candidate = format_identifier(prefix, sequence)

            if not await self.identifier_exists(db, candidate):
                logger.info(
                    f"Allocated identifier {candidate} for domain '{key}'",
                    extra={"event_type": "id_allocation", "custom_id": candidate,
                           "domain": key, "probes": probe}
                )
                return candidate

            # Taken by a manually assigned or legacy ID - advance past it
            logger.debug(f"Identifier {candidate} already taken, probing next")

        logger.warning(
            f"Identifier allocation for '{key}' exhausted {self.max_probes} probes",
            extra={"event_type": "id_allocation", "domain": key, "last_identifier": candidate}
        )
        raise IdentifierConflictError(key, self.max_probes, candidate)

    async def next_sequence(self, db: AsyncSession, domain: str) -> int:
        """Atomically advance and return the domain counter, seeding it on first use"""
        sequence = await self._increment(db, domain)
        if sequence is None:
            await self._seed(db, domain)
            sequence = await self._increment(db, domain)
        return sequence

    async def identifier_exists(self, db: AsyncSession, custom_id: str) -> bool:
        result = await db.execute(
            select(ProblemStatement.id).where(ProblemStatement.custom_id == custom_id).limit(1)
        )
        return result.first() is not None

    async def current_value(self, db: AsyncSession, domain: Union[str, enum.Enum]) -> int:
        """Last sequence number handed out for a domain (0 if none yet)"""
        result = await db.execute(
            select(DomainSequence.last_value).where(DomainSequence.domain == domain_key(domain))
        )
        return result.scalar_one_or_none() or 0

    async def _increment(self, db: AsyncSession, domain: str) -> Optional[int]:
        stmt = (
            update(DomainSequence)
            .where(DomainSequence.domain == domain)
            .values(last_value=DomainSequence.last_value + 1)
            .returning(DomainSequence.last_value)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def _seed(self, db: AsyncSession, domain: str) -> None:
        """Create the counter row, starting from the number of records already in the domain"""
        count_result = await db.execute(
            select(func.count(ProblemStatement.id)).where(ProblemStatement.domain == domain)
        )
        existing = count_result.scalar() or 0

        insert_stmt = _insert_for(db)(DomainSequence).values(domain=domain, last_value=existing)
        if hasattr(insert_stmt, "on_conflict_do_nothing"):
            # Another writer may have seeded the row in the meantime
            insert_stmt = insert_stmt.on_conflict_do_nothing(index_elements=["domain"])
        await db.execute(insert_stmt)

        logger.info(f"Seeded identifier sequence for '{domain}' at {existing}")


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    from sqlalchemy import insert
    return insert


# Singleton instance
id_allocator = IdentifierAllocator()
