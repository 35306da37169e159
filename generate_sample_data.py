import asyncio
from datetime import datetime
import random
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from schoolpay.config import settings
from schoolpay.models.audit import AuditLog
from schoolpay.models.payroll import PayrollRecord
from schoolpay.models.staff import PaymentType, Staff, StaffRole, StaffStatus


async def create_sample_data():
    """Populate database with a sample staff roster"""
    print("🚀 Starting Sample Data Generation...")

    # Initialize Beanie
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    await init_beanie(
        database=client[settings.MONGODB_DB_NAME],
        document_models=[Staff, PayrollRecord, AuditLog]
    )

    positions = {
        StaffRole.TEACHER: ["Mathematics Teacher", "French Teacher", "Physics Teacher", "Arabic Teacher"],
        StaffRole.ADMIN: ["Principal", "Secretary", "Accountant"],
        StaffRole.SUPPORT: ["Librarian", "Driver", "Caretaker"],
    }

    roster = [
        ("Amina Benali", StaffRole.TEACHER, PaymentType.SALARY, 9500),
        ("Youssef El Idrissi", StaffRole.TEACHER, PaymentType.SALARY, 11000),
        ("Salma Ouazzani", StaffRole.TEACHER, PaymentType.HEADCOUNT, 150),
        ("Karim Tazi", StaffRole.ADMIN, PaymentType.SALARY, 14000),
        ("Nadia Chraibi", StaffRole.ADMIN, PaymentType.SALARY, 6500),
        ("Omar Berrada", StaffRole.SUPPORT, PaymentType.SALARY, 3800),
        ("Leila Fassi", StaffRole.TEACHER, PaymentType.COMMISSION, 12),
        ("Hassan Alaoui", StaffRole.SUPPORT, PaymentType.SALARY, 4200),
    ]

    created = 0
    for i, (name, role, payment_type, rate) in enumerate(roster):
        email = f"{name.lower().replace(' ', '.')}@school.ma"

        # Check if already exists
        existing = await Staff.find_one(Staff.email == email)
        if existing:
            print(f"⏩ {name} already exists, skipping...")
            continue

        staff = Staff(
            name=name,
            email=email,
            role=role,
            status=StaffStatus.INACTIVE if i == len(roster) - 1 else StaffStatus.ACTIVE,
            payment_type=payment_type,
            payment_rate=rate,
            hire_date=datetime(random.choice([2019, 2021, 2023]), random.randint(1, 12), 1),
            position=random.choice(positions[role]),
            cnss_number=f"{random.randint(100000000, 999999999)}",
            cin=f"BK{random.randint(100000, 999999)}",
        )
        await staff.insert()
        created += 1
        print(f"✅ Created {name} ({role.value}, {payment_type.value} {rate})")

    print(f"🎉 Sample data ready: {created} staff created")
    client.close()


if __name__ == "__main__":
    asyncio.run(create_sample_data())
