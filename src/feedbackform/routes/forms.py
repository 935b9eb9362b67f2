from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from feedbackform.auth import current_owner
from feedbackform.questions import form_output, public_form_output
from feedbackform.routes.common import form_service, read_json

router = APIRouter(prefix="/api/forms")


@router.post("", tags=["api/forms"])
async def api_create_form(request: Request, owner_id: str = Depends(current_owner)) -> JSONResponse:
    payload = await read_json(request)
    form = form_service(request).create(owner_id, payload)
    return JSONResponse(
        {"message": "Form created successfully", "form": form_output(form)},
        status_code=201,
    )


@router.get("", tags=["api/forms"])
async def api_list_forms(request: Request, owner_id: str = Depends(current_owner)) -> JSONResponse:
    forms = form_service(request).list(owner_id)
    return JSONResponse({"forms": [form_output(form, count) for form, count in forms]})


@router.get("/public/{public_id}", tags=["api/forms"])
async def api_public_form(request: Request, public_id: str) -> JSONResponse:
    form = form_service(request).get_public(public_id)
    return JSONResponse({"form": public_form_output(form)})


@router.get("/{form_id}", tags=["api/forms"])
async def api_get_form(
    request: Request, form_id: str, owner_id: str = Depends(current_owner)
) -> JSONResponse:
    form, count = form_service(request).get(owner_id, form_id)
    return JSONResponse({"form": form_output(form, count)})


@router.put("/{form_id}", tags=["api/forms"])
async def api_update_form(
    request: Request, form_id: str, owner_id: str = Depends(current_owner)
) -> JSONResponse:
    payload = await read_json(request)
    form = form_service(request).update(owner_id, form_id, payload)
    return JSONResponse({"message": "Form updated successfully", "form": form_output(form)})


@router.delete("/{form_id}", tags=["api/forms"])
async def api_delete_form(
    request: Request, form_id: str, owner_id: str = Depends(current_owner)
) -> JSONResponse:
    removed = form_service(request).delete(owner_id, form_id)
    return JSONResponse(
        {
            "message": "Form and all associated responses deleted successfully",
            "deletedResponses": removed,
        }
    )
