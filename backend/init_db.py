"""
Database initialization script
Run this to create tables and seed demo employees
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from timeclock.core.database import SessionLocal
from timeclock.core.exceptions import ConflictError
from timeclock.main import init_database
from timeclock.services.employee_directory import EmployeeDirectory

DEMO_EMPLOYEES = [
    {"name": "Sarah Johnson", "pin": "2001", "email": "sarah@company.com"},
    {"name": "Mike Davis", "pin": "2002", "email": "mike@company.com"},
    {"name": "Lisa Thompson", "pin": "2003", "email": "lisa@company.com"},
    {"name": "David Wilson", "pin": "2004", "email": "david@company.com"},
    {"name": "Emily Brown", "pin": "2005", "email": "emily@company.com"},
]


def seed_data():
    """Seed demo employees (skips PINs already in use)"""
    db = SessionLocal()
    try:
        print("\nSeeding demo employees...")
        directory = EmployeeDirectory(db)
        for data in DEMO_EMPLOYEES:
            try:
                directory.create(**data)
                print(f"✓ Created {data['name']} (PIN {data['pin']})")
            except ConflictError:
                print(f"- PIN {data['pin']} already in use, skipped {data['name']}")
        print("\n✓ Database seeded successfully!")
    finally:
        db.close()


if __name__ == "__main__":
    print("Creating database tables...")
    init_database()
    print("✓ Tables created successfully (Administrator PIN 0000 on a fresh database)")
    if "--demo" in sys.argv:
        seed_data()
