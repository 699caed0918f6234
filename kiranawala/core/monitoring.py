import logging
from typing import Dict, Any, Optional
from datetime import datetime

logger = logging.getLogger("monitoring")

class SyncMonitoring:
    """Process-local counters for remote hits vs. cache fallbacks"""

    def __init__(self):
        self.reset()

    def reset(self):
        self.metrics = {
            "fetches_total": 0,
            "remote_hits": 0,
            "cache_fallbacks": 0,
            "remote_write_failures": 0,
            "average_response_time": 0,
            "last_error": None
        }

    def record_fetch(self, table: str, from_cache: bool, response_time_ms: float):
        """Record one SyncPolicy read and where it was served from"""
        self.metrics["fetches_total"] += 1

        if from_cache:
            self.metrics["cache_fallbacks"] += 1
        else:
            self.metrics["remote_hits"] += 1

        current_avg = self.metrics["average_response_time"]
        total = self.metrics["fetches_total"]
        self.metrics["average_response_time"] = (
            (current_avg * (total - 1) + response_time_ms) / total
        )

    def record_error(self, error: str, table: Optional[str] = None, write: bool = False):
        self.metrics["last_error"] = {
            "error": error,
            "table": table,
            "timestamp": datetime.now().isoformat()
        }
        if write:
            self.metrics["remote_write_failures"] += 1
            logger.error(f"Remote write failed on {table}: {error}")
        else:
            logger.warning(f"Remote read failed on {table}, serving cache: {error}")

    def get_health_status(self) -> Dict[str, Any]:
        total = self.metrics["fetches_total"]

        if total == 0:
            remote_rate = 100.0
        else:
            remote_rate = (self.metrics["remote_hits"] / total) * 100

        if remote_rate >= 99 and self.metrics["average_response_time"] < 500:
            status = "EXCELLENT"
        elif remote_rate >= 95 and self.metrics["average_response_time"] < 1000:
            status = "GOOD"
        elif remote_rate >= 90:
            status = "WARNING"
        else:
            status = "CRITICAL"

        return {
            "status": status,
            "remote_hit_rate": round(remote_rate, 2),
            "cache_fallback_rate": round(100.0 - remote_rate, 2),
            "average_response_time_ms": round(self.metrics["average_response_time"], 2),
            "fetches_total": total,
            "remote_write_failures": self.metrics["remote_write_failures"],
            "last_error": self.metrics["last_error"],
            "timestamp": datetime.now().isoformat()
        }

# Global monitoring instance
monitoring = SyncMonitoring()
