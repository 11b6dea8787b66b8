# garage_admin/health.py
from fastapi import APIRouter

from garage_admin.config import get_settings

router = APIRouter()

@router.get("/health")
def health():
    settings = get_settings()
    return {"status": "ok", "mock_data": settings.use_mock_data}
