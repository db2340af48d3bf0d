from pydantic import BaseModel
from typing import Optional


class CandidateResponse(BaseModel):
    id: int
    name: str
    gender: str
    age: int
    distance_from_me: float
    total_likes: int
    attractiveness_score: float


class DiscoverResponse(BaseModel):
    results: list[CandidateResponse]


class SwipeRequest(BaseModel):
    other_user_id: int
    like: bool


class SwipeResult(BaseModel):
    matched: bool
    match_id: Optional[int] = None


class SwipeResponse(BaseModel):
    results: SwipeResult


class ErrorResponse(BaseModel):
    detail: str
