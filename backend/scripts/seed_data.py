"""
Seed Data Script - Creates the initial units and personnel accounts
Run: python -m scripts.seed_data
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from typing import Dict, Optional

from resetdesk.config.settings import settings
from resetdesk.repositories.mongo_client import create_indexes
from resetdesk.repositories.personnel_repo import PersonnelRepository
from resetdesk.repositories.unit_repo import UnitRepository
from resetdesk.domain.models import Personnel, Unit
from resetdesk.domain.enums import PersonnelStatus, Role
from resetdesk.utils.idgen import generate_personnel_id, generate_unit_id
from resetdesk.utils.passwords import hash_password
from resetdesk.utils.time import utc_now


UNITS = ["POLDA JATIM", "POLRES MALANG", "POLRES SIDOARJO"]

PERSONNEL = [
    {"nrp": "11111111", "name": "Super Admin Polda", "email": "admin.polda@polri.go.id",
     "role": Role.SUPERADMIN, "unit": "POLDA JATIM"},
    {"nrp": "22222222", "name": "Admin Polres Malang", "email": "admin.malang@polri.go.id",
     "role": Role.UNIT_ADMIN, "unit": "POLRES MALANG"},
    {"nrp": "33333333", "name": "Admin Polres Sidoarjo", "email": "admin.sidoarjo@polri.go.id",
     "role": Role.UNIT_ADMIN, "unit": "POLRES SIDOARJO"},
    {"nrp": "44444444", "name": "User Testing", "email": "testing@polri.go.id",
     "role": Role.USER, "unit": "POLRES MALANG"},
]


def seed_units() -> Dict[str, Unit]:
    """Create the default units; returns them keyed by name"""
    repo = UnitRepository()
    units = {}
    for name in UNITS:
        unit = repo.get_unit_by_name(name)
        if unit is None:
            unit = repo.create_unit(Unit(unit_id=generate_unit_id(), name=name))
            print(f"Created unit: {name}")
        units[name] = unit
    return units


def seed_personnel(units: Dict[str, Unit], password: Optional[str] = None) -> int:
    """Create the default accounts that do not exist yet; returns the number created"""
    repo = PersonnelRepository()
    password_hash = hash_password(password or settings.seed_default_password)
    created = 0

    for entry in PERSONNEL:
        if repo.get_by_nrp(entry["nrp"]):
            continue

        unit = units[entry["unit"]]
        now = utc_now()
        repo.create_personnel(Personnel(
            personnel_id=generate_personnel_id(),
            nrp=entry["nrp"],
            name=entry["name"],
            email=entry["email"],
            unit_id=unit.unit_id,
            unit_name=unit.name,
            role=entry["role"],
            status=PersonnelStatus.ACTIVE,
            password_hash=password_hash,
            created_at=now,
            updated_at=now
        ))
        created += 1
        print(f"Created personnel: {entry['nrp']} ({entry['role'].value})")

    return created


def seed_database(password: Optional[str] = None) -> int:
    """Seed units and personnel; safe to run repeatedly"""
    units = seed_units()
    return seed_personnel(units, password)


def main():
    print("=== Seeding database ===")
    print("-" * 40)

    # Create indexes first
    create_indexes()

    created = seed_database()

    print("-" * 40)
    if created:
        print(f"[OK] {created} accounts created (password: {settings.seed_default_password})")
    else:
        print("Database already has data. Skipping seed.")
    print("Done!")


if __name__ == "__main__":
    main()
