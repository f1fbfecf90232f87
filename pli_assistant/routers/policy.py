"""Policy Form API Endpoints

The manual edit path: the form reads the policy snapshot and writes partial
updates through the shared policy store.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from pli_assistant.models.policy import CalculationResult, PolicySnapshot, PolicyUpdate
from pli_assistant.services.policy_store import (
    PolicyStore,
    PolicyValidationError,
    get_policy_store,
)
from pli_assistant.utils.logger import get_logger

router = APIRouter(prefix="/api/v1/policy", tags=["policy"])
logger = get_logger(__name__)


@router.get("", response_model=PolicySnapshot)
async def get_policy(store: PolicyStore = Depends(get_policy_store)) -> PolicySnapshot:
    """Current inputs, derived age, maturity choices and quote"""
    return store.snapshot()


@router.put("", response_model=PolicySnapshot)
async def update_policy(
    update: PolicyUpdate, store: PolicyStore = Depends(get_policy_store)
) -> PolicySnapshot:
    """
    Apply a manual form edit.

    Only the fields present in the body are changed. A date of birth outside
    the eligible ages is stored and reported through `age_eligible`; a
    maturity age that is not a valid choice is rejected.
    """
    try:
        snapshot = store.apply_update(update)
    except PolicyValidationError as e:
        logger.info("Manual policy edit rejected", reason=str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        )

    logger.info(
        "Manual policy edit applied",
        fields=sorted(update.model_fields_set),
        quote_available=snapshot.result is not None,
    )
    return snapshot


@router.get("/quote", response_model=Optional[CalculationResult])
async def get_quote(
    store: PolicyStore = Depends(get_policy_store),
) -> Optional[CalculationResult]:
    """Premium quote, or null while the inputs are not yet computable"""
    return store.calculate()
