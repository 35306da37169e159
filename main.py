"""
Main FastAPI Application
Entry point for the payroll backend
"""
import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie

from schoolpay.config import settings
from schoolpay.logging_config import configure_logging
from schoolpay.models.audit import AuditLog
from schoolpay.models.payroll import PayrollRecord
from schoolpay.models.staff import Staff

# Import routers
from schoolpay.api.routes import payroll, staff

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})")

    # Initialize MongoDB
    client = AsyncIOMotorClient(settings.MONGODB_URL)
    database = client[settings.MONGODB_DB_NAME]

    # Initialize Beanie with document models
    await init_beanie(
        database=database,
        document_models=[Staff, PayrollRecord, AuditLog]
    )

    logger.info(f"Connected to MongoDB: {settings.MONGODB_DB_NAME}")
    logger.info(f"Payroll deduction scheme: {settings.PAYROLL_DEDUCTION_SCHEME}")

    yield

    # Shutdown
    logger.info("Shutting down")
    client.close()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Payroll generation and payslip management for school staff",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(staff.router, prefix="/api/staff", tags=["Staff"])
app.include_router(payroll.router, prefix="/api/payroll", tags=["Payroll"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "School Payroll API",
        "version": settings.APP_VERSION,
        "docs": "/api/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
