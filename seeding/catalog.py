# ============================================================================
# SEED CATALOG
# ============================================================================
# STATUS: Core - Idempotent reference data bootstrap
# PURPOSE: Declarative seed sets, idempotency gate, reference resolution
# CREATED: 19 OCT 2026
# ============================================================================
"""
Seed Catalog

Guarantees the reference catalogs exist exactly once.

Seed sets are declared in dependency order. A record may point at a row
of an earlier set with a symbolic reference:

    Ref("statuses", "Activo")

which is resolved, during the same run, to the id generated for that
row (or, for sets skipped by the gate, to the id already stored).

Gate policies:
- ANCHOR: the first set's row count gates every set. This is the
  historical behaviour: a non-empty anchor means "already seeded".
- PER_SET: each set is gated by its own row count.

The whole run happens in one relational transaction, so a failure in
any set rolls back the earlier ones and the next start tries again.
Failures never propagate: populate() logs them and returns a SeedResult.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple, Type

from pydantic import ValidationError

from core.contracts import SeedGate
from core.errors import SeedError
from core.logging import log_context
from core.models.reference import ReferenceEntity
from repositories.reference_repo import ReferenceRepository, ReferenceSession

logger = logging.getLogger(__name__)


# ============================================================================
# DECLARATIONS
# ============================================================================

@dataclass(frozen=True)
class Ref:
    """Symbolic reference to a row created by an earlier seed set."""
    entity: str
    key: Any

    def __str__(self) -> str:
        return f"{self.entity}[{self.key!r}]"


RecordTemplate = Mapping[str, Any]


@dataclass(frozen=True)
class SeedRecordSet:
    """
    One reference catalog and its rows.

    The idempotency key is the entity (table) name.
    """
    model: Type[ReferenceEntity]
    records: Tuple[RecordTemplate, ...]

    @property
    def entity_name(self) -> str:
        return self.model.__sql_table__

    @property
    def idempotency_key(self) -> str:
        return self.entity_name

    @property
    def key_field(self) -> str:
        return self.model.__sql_key__

    def references(self) -> Iterable[Ref]:
        for record in self.records:
            for value in record.values():
                if isinstance(value, Ref):
                    yield value

    def depends_on(self) -> List[str]:
        """Entities referenced by this set, in first-seen order."""
        seen: List[str] = []
        for ref in self.references():
            if ref.entity not in seen:
                seen.append(ref.entity)
        return seen


# ============================================================================
# RESULTS
# ============================================================================

@dataclass
class StepResult:
    """Result of seeding a single set."""
    name: str
    status: str  # 'success', 'failed', 'skipped', 'rolled_back'
    message: str = ""
    error: Optional[str] = None
    inserted: int = 0


@dataclass
class SeedResult:
    """Complete result of one populate() run."""
    gate: SeedGate
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    success: bool = True
    already_populated: bool = False
    steps: List[StepResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def inserted(self) -> Dict[str, int]:
        return {s.name: s.inserted for s in self.steps if s.status == "success"}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "gate": self.gate.value,
            "timestamp": self.timestamp,
            "success": self.success,
            "already_populated": self.already_populated,
            "steps": [
                {
                    "name": s.name,
                    "status": s.status,
                    "message": s.message,
                    "error": s.error,
                    "inserted": s.inserted,
                }
                for s in self.steps
            ],
            "errors": self.errors,
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status == "success"]),
                "skipped": len([s for s in self.steps if s.status == "skipped"]),
                "failed": len([s for s in self.steps if s.status == "failed"]),
            },
        }


# ============================================================================
# CATALOG
# ============================================================================

class ReferenceSource(Protocol):
    """Anything that can hand out a reference repository (the relational store)."""

    def reference_repository(self) -> ReferenceRepository: ...


class SeedCatalog:
    """
    Declarative table of reference data sets plus the idempotency check.

    Args:
        source: Provides the reference repository once the store is connected
        sets: Seed sets in dependency order; the first one is the anchor
        gate: Idempotency gate policy
    """

    def __init__(
        self,
        source: ReferenceSource,
        sets: Sequence[SeedRecordSet],
        gate: SeedGate = SeedGate.ANCHOR,
    ):
        if not sets:
            raise ValueError("SeedCatalog needs at least one seed set")
        self._validate_order(sets)

        self.source = source
        self.sets: Tuple[SeedRecordSet, ...] = tuple(sets)
        self.gate = gate

    @staticmethod
    def _validate_order(sets: Sequence[SeedRecordSet]) -> None:
        """Reject catalogs whose declared order breaks a symbolic reference."""
        declared: Dict[str, SeedRecordSet] = {}
        for seed_set in sets:
            if seed_set.entity_name in declared:
                raise ValueError(f"Duplicate seed set: {seed_set.entity_name}")
            for ref in seed_set.references():
                target = declared.get(ref.entity)
                if target is None:
                    raise ValueError(
                        f"Seed set '{seed_set.entity_name}' references '{ref.entity}' "
                        f"which is not declared before it"
                    )
                if not any(r.get(target.key_field) == ref.key for r in target.records):
                    raise ValueError(f"Seed set '{seed_set.entity_name}' references unknown row {ref}")
            declared[seed_set.entity_name] = seed_set

    @property
    def anchor(self) -> SeedRecordSet:
        return self.sets[0]

    def get_set(self, idempotency_key: str) -> SeedRecordSet:
        for seed_set in self.sets:
            if seed_set.idempotency_key == idempotency_key:
                return seed_set
        raise KeyError(f"Unknown seed set: {idempotency_key}")

    def _gate_entity(self, idempotency_key: str) -> str:
        if self.gate is SeedGate.ANCHOR:
            return self.anchor.entity_name
        return self.get_set(idempotency_key).entity_name

    async def is_populated(self, idempotency_key: Optional[str] = None) -> bool:
        """
        Idempotency check.

        Under the ANCHOR gate every key answers with the anchor's count.

        Raises:
            SeedError: the count query failed
        """
        entity = self._gate_entity(idempotency_key or self.anchor.idempotency_key)
        try:
            count = await self.source.reference_repository().count(entity)
        except Exception as e:
            raise SeedError(f"Could not count {entity}: {e}", entity=entity) from e
        return count > 0

    async def counts(self) -> Dict[str, int]:
        """Current row count of every declared set."""
        return await self.source.reference_repository().counts(
            [s.entity_name for s in self.sets]
        )

    # ------------------------------------------------------------------
    # Population
    # ------------------------------------------------------------------

    async def populate(self) -> SeedResult:
        """
        Insert every set that is not populated yet.

        Never raises: failures are logged, rolled back and reported in the
        returned SeedResult.
        """
        result = SeedResult(gate=self.gate)

        with log_context(operation="seed"):
            try:
                async with self.source.reference_repository().session() as session:
                    await self._populate(session, result)
            except SeedError as e:
                self._record_failure(result, e)
            except Exception as e:
                self._record_failure(result, SeedError(f"Seeding aborted: {e}"))

        if result.success and not result.already_populated:
            logger.info(f"Reference data created: {result.inserted}")
        return result

    async def _populate(self, session: ReferenceSession, result: SeedResult) -> None:
        resolved: Dict[str, Dict[Any, int]] = {}
        needed = {ref_entity for s in self.sets for ref_entity in s.depends_on()}

        if self.gate is SeedGate.ANCHOR:
            if await self._count(session, self.anchor) > 0:
                logger.info("Reference data already present, skipping seed")
                result.already_populated = True
                result.steps = [
                    StepResult(name=s.entity_name, status="skipped", message="anchor populated")
                    for s in self.sets
                ]
                return

        logger.info("Creating reference data...")
        for index, seed_set in enumerate(self.sets):
            with log_context(entity=seed_set.entity_name):
                if self.gate is SeedGate.PER_SET and await self._count(session, seed_set) > 0:
                    result.steps.append(
                        StepResult(name=seed_set.entity_name, status="skipped", message="already populated")
                    )
                    if seed_set.entity_name in needed:
                        resolved[seed_set.entity_name] = await session.fetch_keys(
                            seed_set.entity_name, seed_set.key_field
                        )
                    continue

                try:
                    rows = [self._build_row(seed_set, record, resolved) for record in seed_set.records]
                    ids = await session.bulk_insert(seed_set.entity_name, rows, seed_set.key_field)
                except SeedError as e:
                    self._mark_remaining(result, index)
                    e.entity = e.entity or seed_set.entity_name
                    raise
                except Exception as e:
                    self._mark_remaining(result, index)
                    raise SeedError(
                        f"Bulk insert into {seed_set.entity_name} failed: {e}",
                        entity=seed_set.entity_name,
                    ) from e

                resolved[seed_set.entity_name] = ids
                result.steps.append(
                    StepResult(
                        name=seed_set.entity_name,
                        status="success",
                        message=f"inserted {len(rows)} rows",
                        inserted=len(rows),
                    )
                )
                logger.debug(f"Seeded {len(rows)} {seed_set.entity_name}")

    async def _count(self, session: ReferenceSession, seed_set: SeedRecordSet) -> int:
        try:
            return await session.count(seed_set.entity_name)
        except Exception as e:
            raise SeedError(
                f"Could not count {seed_set.entity_name}: {e}",
                entity=seed_set.entity_name,
            ) from e

    def _build_row(
        self,
        seed_set: SeedRecordSet,
        record: RecordTemplate,
        resolved: Dict[str, Dict[Any, int]],
    ) -> Dict[str, Any]:
        """Resolve references and validate one record against its model."""
        values: Dict[str, Any] = {}
        for column, value in record.items():
            if isinstance(value, Ref):
                row_id = resolved.get(value.entity, {}).get(value.key)
                if row_id is None:
                    raise SeedError(
                        f"Unresolved reference {value} in {seed_set.entity_name}",
                        entity=seed_set.entity_name,
                    )
                value = row_id
            values[column] = value

        try:
            entity = seed_set.model(**values)
        except ValidationError as e:
            raise SeedError(
                f"Invalid {seed_set.entity_name} record {values.get(seed_set.key_field)!r}: {e}",
                entity=seed_set.entity_name,
            ) from e

        return entity.model_dump(include=set(seed_set.model.column_names()))

    def _mark_remaining(self, result: SeedResult, failed_index: int) -> None:
        """Steps after a failure: earlier inserts roll back, later sets never run."""
        for step in result.steps:
            if step.status == "success":
                step.status = "rolled_back"
                step.inserted = 0
        failed = self.sets[failed_index].entity_name
        result.steps.append(StepResult(name=failed, status="failed"))
        for seed_set in self.sets[failed_index + 1:]:
            result.steps.append(
                StepResult(name=seed_set.entity_name, status="skipped", message="not attempted")
            )

    def _record_failure(self, result: SeedResult, error: SeedError) -> None:
        result.success = False
        result.errors.append(error.message)
        for step in result.steps:
            if step.status == "failed" and step.error is None:
                step.error = error.message
        logger.error(f"Error creating reference data: {error.message}")


__all__ = [
    "Ref",
    "RecordTemplate",
    "SeedRecordSet",
    "StepResult",
    "SeedResult",
    "SeedCatalog",
]
