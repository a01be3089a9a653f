# ============================================================================
# REFERENCE DATA SETS
# ============================================================================
# STATUS: Data - Initial lookup catalogs
# PURPOSE: Declarative seed sets in dependency order
# CREATED: 19 OCT 2026
# ============================================================================
"""
Reference Data

The five catalogs created on first start:

    statuses (5) -> sexes (4) -> roles (5) -> genres (12) -> countries (10)

Genres and countries point at the "Activo" status. statuses is the anchor
set for the idempotency gate, so it must stay first.
"""

from typing import List

from core.models.reference import Country, Genre, Role, Sex, Status
from seeding.catalog import Ref, SeedRecordSet

ACTIVE = Ref("statuses", "Activo")


STATUSES = SeedRecordSet(
    model=Status,
    records=(
        {"name": "Activo", "description": "Registro activo y disponible"},
        {"name": "Inactivo", "description": "Registro inactivo temporalmente"},
        {"name": "Eliminado", "description": "Registro marcado para eliminación"},
        {"name": "Pendiente", "description": "Registro pendiente de aprobación"},
        {"name": "Suspendido", "description": "Registro suspendido por políticas"},
    ),
)

SEXES = SeedRecordSet(
    model=Sex,
    records=(
        {"name": "Masculino", "description": "Género masculino"},
        {"name": "Femenino", "description": "Género femenino"},
        {"name": "No binario", "description": "Género no binario"},
        {"name": "Prefiero no decir", "description": "Prefiere no especificar"},
    ),
)

ROLES = SeedRecordSet(
    model=Role,
    records=(
        {"name": "Administrador", "description": "Acceso completo al sistema",
         "permissions": {"all": True}},
        {"name": "Manager", "description": "Gestión de artistas y eventos",
         "permissions": {"artists": True, "events": True}},
        {"name": "Artista", "description": "Perfil de artista",
         "permissions": {"profile": True, "music": True}},
        {"name": "Cliente", "description": "Usuario final consumidor",
         "permissions": {"purchase": True, "profile": True}},
        {"name": "Disquera", "description": "Representante de disquera",
         "permissions": {"contracts": True, "artists": True}},
    ),
)

GENRES = SeedRecordSet(
    model=Genre,
    records=tuple(
        {"name": name, "description": description, "status_id": ACTIVE}
        for name, description in [
            ("Rock", "Música rock en todas sus variantes"),
            ("Pop", "Música popular contemporánea"),
            ("Jazz", "Jazz tradicional y contemporáneo"),
            ("Clásica", "Música clásica y orquestal"),
            ("Electrónica", "Música electrónica y EDM"),
            ("Hip-Hop", "Hip-Hop y Rap"),
            ("Reggae", "Reggae y música caribeña"),
            ("Metal", "Heavy Metal y subgéneros"),
            ("Folk", "Música folk y tradicional"),
            ("Blues", "Blues tradicional y moderno"),
            ("Country", "Música country y americana"),
            ("Reggaeton", "Reggaeton y música urbana latina"),
        ]
    ),
)

COUNTRIES = SeedRecordSet(
    model=Country,
    records=tuple(
        {"name": name, "iso_code": iso_code, "phone_code": phone_code, "status_id": ACTIVE}
        for name, iso_code, phone_code in [
            ("Colombia", "COL", "+57"),
            ("México", "MEX", "+52"),
            ("Argentina", "ARG", "+54"),
            ("España", "ESP", "+34"),
            ("Estados Unidos", "USA", "+1"),
            ("Brasil", "BRA", "+55"),
            ("Chile", "CHL", "+56"),
            ("Perú", "PER", "+51"),
            ("Ecuador", "ECU", "+593"),
            ("Venezuela", "VEN", "+58"),
        ]
    ),
)


def default_seed_sets() -> List[SeedRecordSet]:
    """All reference sets in dependency order."""
    return [STATUSES, SEXES, ROLES, GENRES, COUNTRIES]
