"""
Pydantic schemas shared across API responses
"""
from pydantic import BaseModel
from datetime import datetime


class ErrorResponse(BaseModel):
    """Body of every error response"""
    success: bool = False
    error: str


class SuccessResponse(BaseModel):
    """Body of responses that carry no data"""
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    """Response model for health check"""
    status: str
    timestamp: datetime
    version: str
    storage_backend: str
