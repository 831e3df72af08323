from datetime import date
from typing import Callable, List, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from caixa.db import get_db
from caixa.reports import service
from caixa.reports.errors import NotFoundError, UpstreamError, ValidationError
from caixa.reports.schemas import (
    CashFlowAlertResponse,
    CashFlowKpisResponse,
    CashFlowPointResponse,
    CategoryExpenseResponse,
    DashboardStatsResponse,
    DREComparisonResponse,
)
from caixa.reports.store import SqlAlchemyReportStore

router = APIRouter(prefix="/api/reports", tags=["reports"])

T = TypeVar("T")


def _run(report: Callable[..., T], db: Session, *args, **kwargs) -> T:
    try:
        return report(SqlAlchemyReportStore(db), *args, **kwargs)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except UpstreamError as exc:
        raise HTTPException(status_code=502, detail=str(exc))


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
def dashboard_stats(
    company_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return _run(service.get_dashboard_stats, db, company_id, start_date, end_date, as_of=as_of)


@router.get("/cash-flow", response_model=List[CashFlowPointResponse])
def cash_flow(
    company_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    basis: Optional[str] = Query(None, pattern="^(cash|accrual)$"),
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return _run(service.get_cash_flow, db, company_id, start_date, end_date, basis=basis, as_of=as_of)


@router.get("/cash-flow/kpis", response_model=CashFlowKpisResponse)
def cash_flow_kpis(
    company_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    basis: Optional[str] = Query(None, pattern="^(cash|accrual)$"),
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return _run(service.get_cash_flow_kpis, db, company_id, start_date, end_date, basis=basis, as_of=as_of)


@router.get("/cash-flow/alerts", response_model=List[CashFlowAlertResponse])
def cash_flow_alerts(
    company_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return _run(service.get_cash_flow_alerts, db, company_id, start_date, end_date, as_of=as_of)


@router.get("/category-expenses", response_model=List[CategoryExpenseResponse])
def category_expenses(
    company_id: int = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    basis: Optional[str] = Query(None, pattern="^(cash|accrual)$"),
    db: Session = Depends(get_db),
):
    return _run(service.get_category_expenses, db, company_id, start_date, end_date, basis=basis)


@router.get("/dre", response_model=DREComparisonResponse)
def dre(
    company_id: int = Query(...),
    year: int = Query(...),
    month: int = Query(...),
    breakdown: Optional[str] = Query(None, pattern="^(direct|fixed_ratio)$"),
    db: Session = Depends(get_db),
):
    return _run(service.get_dre, db, company_id, year, month, breakdown=breakdown)
