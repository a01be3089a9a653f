# ============================================================================
# REFERENCE DATA MODELS
# ============================================================================
# STATUS: Domain model - Lookup catalogs in the relational store
# PURPOSE: Status, sex, role, genre and country reference entities
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reference Data Models

Small, rarely-changing catalogs required before any domain data can be
created. Each model carries the SQL metadata used by the schema sync
(repositories/schema.py) and the seeding repository.

Dependency order:
    statuses -> sexes -> roles -> genres (status_id) -> countries (status_id)
"""

from typing import ClassVar, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field


class ReferenceEntity(BaseModel):
    """
    Base for reference catalog rows.

    `name` is the natural key: symbolic references between seed sets
    resolve through it to the surrogate `id` column.
    """

    # SQL DDL METADATA
    __sql_table__: ClassVar[str] = ""
    __sql_key__: ClassVar[str] = "name"
    __sql_columns__: ClassVar[List[Tuple[str, str]]] = [
        ("name", "VARCHAR(100) NOT NULL UNIQUE"),
        ("description", "VARCHAR(255)"),
    ]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {}

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)

    model_config = {"frozen": True, "extra": "forbid"}

    @classmethod
    def column_names(cls) -> List[str]:
        return [column for column, _ in cls.__sql_columns__]


class Status(ReferenceEntity):
    """Record status (Activo, Inactivo, ...). Maps to: statuses"""

    __sql_table__: ClassVar[str] = "statuses"


class Sex(ReferenceEntity):
    """Maps to: sexes"""

    __sql_table__: ClassVar[str] = "sexes"


class Role(ReferenceEntity):
    """User role with its permission flags. Maps to: roles"""

    __sql_table__: ClassVar[str] = "roles"
    __sql_columns__: ClassVar[List[Tuple[str, str]]] = ReferenceEntity.__sql_columns__ + [
        ("permissions", "JSONB NOT NULL DEFAULT '{}'::jsonb"),
    ]

    permissions: Dict[str, bool] = Field(default_factory=dict)


class Genre(ReferenceEntity):
    """Musical genre. Maps to: genres"""

    __sql_table__: ClassVar[str] = "genres"
    __sql_columns__: ClassVar[List[Tuple[str, str]]] = ReferenceEntity.__sql_columns__ + [
        ("status_id", "INTEGER NOT NULL"),
    ]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {"status_id": "statuses"}

    status_id: int = Field(..., gt=0)


class Country(ReferenceEntity):
    """Country with ISO-3166 alpha-3 code and dialing prefix. Maps to: countries"""

    __sql_table__: ClassVar[str] = "countries"
    __sql_columns__: ClassVar[List[Tuple[str, str]]] = ReferenceEntity.__sql_columns__ + [
        ("iso_code", "CHAR(3) NOT NULL UNIQUE"),
        ("phone_code", "VARCHAR(8) NOT NULL"),
        ("status_id", "INTEGER NOT NULL"),
    ]
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {"status_id": "statuses"}

    iso_code: str = Field(..., min_length=3, max_length=3)
    phone_code: str = Field(..., pattern=r"^\+\d{1,4}$")
    status_id: int = Field(..., gt=0)


REFERENCE_MODELS: List[Type[ReferenceEntity]] = [Status, Sex, Role, Genre, Country]


def get_reference_model(table: str) -> Type[ReferenceEntity]:
    """Look up a reference model by table name."""
    for model in REFERENCE_MODELS:
        if model.__sql_table__ == table:
            return model
    raise KeyError(f"Unknown reference entity: {table}")
