from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.router import api_router
from app.core import logging  # Initialize logging
from app.schemas.conversion_schema import HealthStatus

SERVICE_NAME = "VCF2FASTA"

app = FastAPI(
    title="VCF2FASTA API",
    description="Streaming conversion of multi-sample VCF files into aligned per-sample FASTA",
    version="1.0.0"
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API Routers
app.include_router(api_router, prefix="/api/v1")


@app.get("/health", response_model=HealthStatus)
async def health_check():
    return {"status": "ok", "service": SERVICE_NAME}
