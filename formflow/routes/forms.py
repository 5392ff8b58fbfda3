"""Endpoints serving form documents from the configured forms directory."""

from fastapi import APIRouter, Depends, HTTPException

from formflow.services.form_loader import (
    FormDocumentError,
    FormLoader,
    FormNotFoundError,
    form_to_dict,
    get_form_loader,
)
from formflow.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/forms")


@router.get("")
async def list_forms(loader: FormLoader = Depends(get_form_loader)) -> dict:
    """List the ids of all form documents available to load."""
    return {"forms": loader.list_forms()}


@router.get("/{form_id}")
async def get_form(form_id: str, loader: FormLoader = Depends(get_form_loader)) -> dict:
    """Return a form document with camelCase keys.

    Raises:
        HTTPException: 404 if the form does not exist, 422 if it is invalid
    """
    try:
        form = loader.load_form(form_id)
    except FormNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FormDocumentError as e:
        logger.error(f"Form {form_id} failed to load: {e}", extra={"form_id": form_id})
        raise HTTPException(status_code=422, detail=str(e))

    return form_to_dict(form)
