from typing import Any, Dict
from fastapi import HTTPException
from kiranawala.schemas.result import Fetched, NotFound, Ok, Outcome

def listing(fetched: Fetched) -> Dict[str, Any]:
    return {
        "source": fetched.source.value,
        "degraded": fetched.degraded,
        "items": fetched.items,
    }

def unwrap(outcome: Outcome, what: str):
    if isinstance(outcome, Ok):
        return outcome.value
    if isinstance(outcome, NotFound):
        raise HTTPException(status_code=404, detail=f"{what} {outcome.key} not found")
    raise HTTPException(status_code=503, detail=f"{what} unavailable: {outcome.cause}")
