# ============================================================================
# SEEDING MODULE
# ============================================================================
# STATUS: Core - Reference data bootstrap
# PURPOSE: Export the seed catalog and the default reference sets
# CREATED: 19 OCT 2026
# ============================================================================

from seeding.catalog import Ref, SeedCatalog, SeedRecordSet, SeedResult, StepResult
from seeding.reference_data import default_seed_sets

__all__ = [
    "Ref",
    "SeedCatalog",
    "SeedRecordSet",
    "SeedResult",
    "StepResult",
    "default_seed_sets",
]
