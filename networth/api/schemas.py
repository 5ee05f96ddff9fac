from pydantic import BaseModel
from typing import List, Literal, Optional

class DataPoint(BaseModel):
    date: str
    value: float

class PortfolioPerformanceOut(BaseModel):
    id: str
    name: str
    data_points: List[DataPoint]
    start_value: float
    end_value: float
    change: float
    change_pct: float

class PerformanceResponse(BaseModel):
    period: Literal['daily', 'weekly', 'monthly', 'yearly']
    data_points: List[DataPoint]
    start_value: float
    end_value: float
    change: float
    change_pct: float
    portfolios: Optional[List[PortfolioPerformanceOut]] = None

class HealthResponse(BaseModel):
    ok: bool
    db: str
