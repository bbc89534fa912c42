import random
import uuid

from faker import Faker
from sqlalchemy import create_engine, MetaData, Table

from camp_portal.config import get_env
from camp_portal.database import init_schema

# --------------------------------------------------------------------
# CONFIG
# --------------------------------------------------------------------
NUM_TERRITORIES = 8
NUM_EMPLOYEES = 8          # one BE per territory
NUM_MANAGERS = 3
DOCTORS_PER_TERRITORY = (2, 6)   # min, max
P_ELIGIBLE = 0.7

SPECIALTIES = [
    "General Physician", "Orthopaedics", "Gynaecology",
    "Endocrinology", "Paediatrics", "Internal Medicine",
]

# --------------------------------------------------------------------
# SETUP
# --------------------------------------------------------------------
fake = Faker("en_IN")
random.seed(42)
Faker.seed(42)

engine = create_engine(get_env("DB_URI"))
init_schema(engine)
metadata = MetaData()

users = Table("users", metadata, autoload_with=engine)
usersbm = Table("usersbm", metadata, autoload_with=engine)
doctors = Table("doctors", metadata, autoload_with=engine)


# --------------------------------------------------------------------
# HELPERS
# --------------------------------------------------------------------
def new_id():
    return str(uuid.uuid4())


def imacx_id(prefix):
    return f"{prefix}{fake.unique.random_int(10000, 99999)}"


def mobile():
    return f"9{fake.random_number(digits=9, fix_len=True)}"


# --------------------------------------------------------------------
# SEED FUNCTIONS
# --------------------------------------------------------------------
def seed_employees(conn, territories):
    rows = []
    for territory in territories[:NUM_EMPLOYEES]:
        code = imacx_id("BE")
        rows.append(
            {
                "id": new_id(),
                "imacx_id": code,
                "territory": territory,
                "name": fake.name(),
                "phone": mobile(),
                "email": f"{code.lower()}@{fake.free_email_domain()}",
            }
        )
    conn.execute(users.insert(), rows)
    return rows


def seed_managers(conn, territories):
    """One row per supervised BE territory, all sharing the manager's IMACX ID."""
    rows = []
    chunks = [territories[i::NUM_MANAGERS] for i in range(NUM_MANAGERS)]
    for n, chunk in enumerate(chunks, 1):
        code = imacx_id("BM")
        name = fake.name()
        phone = mobile()
        for be_territory in chunk:
            rows.append(
                {
                    "id": new_id(),
                    "imacx_id": code,
                    "territory": f"bm{n}",
                    "beterritory": be_territory,
                    "name": name,
                    "phone": phone,
                    "email": None,
                }
            )
    conn.execute(usersbm.insert(), rows)
    return rows


def seed_doctors(conn, territories):
    rows = []
    for territory in territories:
        for _ in range(random.randint(*DOCTORS_PER_TERRITORY)):
            last = fake.last_name()
            phone = mobile()
            rows.append(
                {
                    "id": new_id(),
                    "imacx_code": f"DR{fake.unique.random_int(100000, 999999)}",
                    "name": f"{fake.first_name()} {last}",
                    "specialty": random.choice(SPECIALTIES),
                    "clinic_name": f"{last} Clinic",
                    "clinic_address": fake.street_address(),
                    "city": fake.city(),
                    "phone": phone,
                    "whatsapp_number": phone if random.random() < 0.5 else None,
                    "territory": territory,
                    "employee_code": None,
                    "is_selected_by_marketing": random.random() < P_ELIGIBLE,
                }
            )
    conn.execute(doctors.insert(), rows)
    return rows


# --------------------------------------------------------------------
# MAIN
# --------------------------------------------------------------------
def main():
    territories = [f"{fake.city().lower().replace(' ', '-')}-{i}" for i in range(NUM_TERRITORIES)]
    with engine.begin() as conn:
        print("Seeding BE users...")
        employees = seed_employees(conn, territories)

        print("Seeding BM users...")
        managers = seed_managers(conn, territories)

        print("Seeding doctors...")
        seeded = seed_doctors(conn, territories)

    print(f"Done! {len(employees)} BE, {len({m['imacx_id'] for m in managers})} BM, {len(seeded)} doctors.")
    print("\nSample IMACX IDs:")
    print(f"  BE: {employees[0]['imacx_id']} (territory {employees[0]['territory']})")
    print(f"  BM: {managers[0]['imacx_id']}")


if __name__ == "__main__":
    main()
