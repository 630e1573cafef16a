from pydantic import BaseModel, Field
from typing import List, Optional


class ConversionJobStatus(BaseModel):
    job_id: str
    status: str = Field(..., description="pending | running | completed | failed | canceled")
    progress: float = Field(..., ge=0.0, le=1.0, description="Fraction of input processed")
    total_size: Optional[int] = Field(None, description="Uploaded VCF size in bytes")
    sample_names: List[str] = []
    error: Optional[str] = None
    sequence_length: Optional[int] = Field(None, description="Aligned length of every output record")
    result_url: Optional[str] = None


class HealthStatus(BaseModel):
    status: str
    service: str
