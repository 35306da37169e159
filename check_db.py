import asyncio
from motor.motor_asyncio import AsyncIOMotorClient
from schoolpay.config import settings

async def check():
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    db = client[settings.MONGODB_DB_NAME]
    staff_count = await db.staff.count_documents({})
    active_salaried = await db.staff.count_documents({"status": "active", "payment_type": "salary"})
    payroll_count = await db.payrolls.count_documents({})
    print(f"COUNT_STATUS: Staff={staff_count} (active salaried={active_salaried}), Payrolls={payroll_count}")
    client.close()

if __name__ == "__main__":
    asyncio.run(check())
