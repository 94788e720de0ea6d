"""
Dashboard data routes.

``root_router`` is mounted at the server root (health check, CSV upload);
``router`` is mounted under the route prefix (risk data, graph points, insights).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from riskviz_dashboard.api.routes import get_store
from riskviz_dashboard.db import Store
from riskviz_dashboard.errors import UploadError
from riskviz_dashboard.logger import get_logger
from riskviz_dashboard.models import GraphPoint, Insight, PointIn, UploadResult
from riskviz_dashboard.services import risk_service

logger = get_logger(__name__)

ACCEPTED_EXTENSIONS = (".csv",)

root_router = APIRouter(tags=["Status"])
router = APIRouter(tags=["Risk Data"])


@root_router.get("/health")
def health() -> dict[str, str]:
    """Liveness check for the dashboard's backend status indicator."""
    return {"status": "ok", "message": "Backend server is running"}


@root_router.post("/upload", response_model=UploadResult)
def upload(request: Request, file: Optional[UploadFile] = File(None), store: Store = Depends(get_store)):
    """Upload a CSV of risk data (or plain x,y points) and store every row."""
    if file is None or not file.filename:
        raise UploadError("No file uploaded")
    if not file.filename.lower().endswith(ACCEPTED_EXTENSIONS):
        raise UploadError(f"Unsupported file type: {file.filename}. Upload a .csv file.")
    limit = request.app.state.config.max_upload_bytes
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise UploadError(f"File exceeds the {limit // (1024 * 1024)}MB upload limit")
    logger.info("upload_received", filename=file.filename, size=len(content))
    return risk_service.ingest_csv(store, content, filename=file.filename)


@router.get("/risk-data")
def get_risk_data(store: Store = Depends(get_store)):
    return risk_service.list_risk_data(store)


@router.delete("/risk-data")
def clear_risk_data(store: Store = Depends(get_store)):
    removed = store.risk_data.clear()
    logger.info("risk_data_cleared", removed=removed)
    return {"message": "All risk data cleared"}


@router.get("/points")
def get_points(store: Store = Depends(get_store)):
    return store.points.all()


@router.post("/points")
def add_point(point: PointIn, store: Store = Depends(get_store)):
    return store.points.insert(GraphPoint(x=point.x or 0.0, y=point.y or 0.0))


@router.get("/insights", response_model=List[Insight])
def get_insights(store: Store = Depends(get_store)):
    return risk_service.generate_insights(store.risk_data.all())
