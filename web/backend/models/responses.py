#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


class GeoPointOut(BaseModel):
    latitude: float
    longitude: float


class TutorMatch(BaseModel):
    """A ranked tutor with its score breakdown."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "name": "Budi Santoso",
                "email": "budi@example.com",
                "subjects": ["Matematika", "Fisika"],
                "hourly_price": 150000,
                "location": {"latitude": -6.2, "longitude": 106.8},
                "experience": "S2 Matematika ITB, 8+ tahun mengajar",
                "availability": ["monday", "wednesday"],
                "teaching_styles": ["interactive"],
                "rating": 4.8,
                "match_score": 0.91,
                "distance_km": 2.4,
                "match_breakdown": {
                    "distance": 0.76, "price": 1.0, "experience": 1.0,
                    "availability": 1.0, "subjects": 1.0, "rating": 0.96
                }
            }
        }
    )

    id: str
    name: str
    email: Optional[str] = None
    subjects: List[str] = Field(default_factory=list)
    hourly_price: Optional[float] = None
    location: Optional[GeoPointOut] = None
    experience: str = ""
    availability: List[str] = Field(default_factory=list)
    teaching_styles: List[str] = Field(default_factory=list)
    rating: float = 0.0
    match_score: float
    distance_km: Optional[float] = None
    match_breakdown: Dict[str, float] = Field(default_factory=dict)


class TutorSearchResponse(BaseModel):
    success: bool
    count: int
    total_candidates: int
    search_time_ms: int
    results: List[TutorMatch]


class DeletionPreviewItem(BaseModel):
    table_name: str
    records_affected: int = Field(ge=0)
    data_type: str


class DeletionPreviewResponse(BaseModel):
    """What a delete of the user would remove."""
    success: bool
    user_id: str
    source: str  # authoritative|manual
    warning: Optional[str] = None
    total_records: int
    preview: List[DeletionPreviewItem]


class DeletedUser(BaseModel):
    id: str
    email: Optional[str]
    user_code: Optional[str]


class DeletionResponse(BaseModel):
    success: bool
    message: str
    deleted_user: DeletedUser
    deleted_by: str
    deleted_at: str
    preview_source: Optional[str] = None
    cascade_impact: List[DeletionPreviewItem] = Field(default_factory=list)


class StatusTypeOption(BaseModel):
    value: str
    label: str


class StatusTypesResponse(BaseModel):
    success: bool
    count: int
    data: List[StatusTypeOption]
