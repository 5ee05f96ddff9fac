from fastapi import APIRouter, Depends, Header, HTTPException, Request
from .schemas import HealthResponse, PerformanceResponse
from ..config import settings
from ..db import get_conn
from ..pipeline.errors import AuthorizationError, RequestCancelled, ValidationError
from ..pipeline.orchestrator import PerformanceService
from ..stores import SqliteCashStore, SqliteHoldingStore, SqlitePortfolioStore

router = APIRouter()

def current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    # Authentication happens upstream; the gateway forwards the caller id.
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(401, 'Unauthorized')
    return x_user_id.strip()

def get_performance_service(request: Request):
    conn = get_conn(settings.db_path)
    try:
        yield PerformanceService(
            SqlitePortfolioStore(conn),
            SqliteHoldingStore(conn),
            SqliteCashStore(conn),
            request.app.state.price_provider,
        )
    finally:
        conn.close()

@router.get(
    '/health',
    response_model=HealthResponse,
    summary="Health check",
    description="Returns service and DB connectivity.",
    tags=["Health"],
)
def health():
    try:
        conn = get_conn(settings.db_path)
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
        return {'ok': True, 'db': 'ok'}
    except Exception as e:
        raise HTTPException(503, f'db_error: {e}')

@router.get(
    '/dashboard/performance',
    response_model=PerformanceResponse,
    response_model_exclude_none=True,
    summary="Portfolio performance chart",
    description=(
        "Historical valuation of the caller's portfolios, bucketed daily|weekly|monthly|yearly. "
        "Current holdings are valued against historical closes across the whole range; "
        "cash balances are held constant. "
        "Per-portfolio breakdown is returned unless portfolio_id is given."
    ),
    tags=["Dashboard"],
)
def dashboard_performance(
    period: str | None = None,
    portfolio_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    user_id: str = Depends(current_user_id),
    service: PerformanceService = Depends(get_performance_service),
):
    try:
        result = service.performance(
            user_id,
            period=period,
            portfolio_id=portfolio_id,
            start_date=start_date,
            end_date=end_date,
        )
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except AuthorizationError as e:
        raise HTTPException(403, str(e))
    except RequestCancelled as e:
        raise HTTPException(504, str(e))
    return result.to_dict()
