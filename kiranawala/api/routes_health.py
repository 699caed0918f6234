from fastapi import APIRouter
from kiranawala.core.monitoring import monitoring

router = APIRouter()

@router.get("/health")
def get_system_health():
    """Remote hit rate vs. cache fallbacks since process start"""
    return monitoring.get_health_status()
