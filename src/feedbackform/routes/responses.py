from __future__ import annotations

import re
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from feedbackform.auth import current_owner
from feedbackform.responses import parse_page_params
from feedbackform.routes.common import read_json, response_service
from feedbackform.utils import to_iso

router = APIRouter(prefix="/api/responses")

# Content-Disposition はlatin-1で送られるためASCIIに限定する
_UNSAFE_FILENAME = re.compile(r"[^\w\- .]+", re.ASCII)


def response_output(response: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": response["id"],
        "form": response["form_id"],
        "answers": [
            {
                "questionId": answer["question_id"],
                "questionText": answer["question_text"],
                "answer": answer["answer"],
            }
            for answer in response.get("answers", [])
        ],
        "submittedAt": to_iso(response["submitted_at"]),
        "ipAddress": response.get("ip_address"),
        "userAgent": response.get("user_agent"),
    }


def export_filename(title: str) -> str:
    safe = _UNSAFE_FILENAME.sub("_", title).strip() or "form"
    return f"{safe}_responses.csv"


@router.post("/{public_id}", tags=["api/responses"])
async def api_submit_response(request: Request, public_id: str) -> JSONResponse:
    payload = await read_json(request)
    response = response_service(request).submit(
        public_id,
        payload,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )
    return JSONResponse(
        {"message": "Response submitted successfully", "responseId": response["id"]},
        status_code=201,
    )


@router.get("/form/{form_id}", tags=["api/responses"])
async def api_list_responses(
    request: Request, form_id: str, owner_id: str = Depends(current_owner)
) -> JSONResponse:
    settings = request.app.state.settings
    page, limit = parse_page_params(
        request.query_params.get("page"),
        request.query_params.get("limit"),
        settings.default_page_limit,
        settings.max_page_limit,
    )
    items, paging, summary = response_service(request).list_page(owner_id, form_id, page, limit)
    return JSONResponse(
        {
            "responses": [response_output(item) for item in items],
            "pagination": paging.to_dict(),
            "summary": summary,
        }
    )


@router.get("/form/{form_id}/export", tags=["api/responses"])
async def api_export_responses(
    request: Request, form_id: str, owner_id: str = Depends(current_owner)
) -> PlainTextResponse:
    form, content = response_service(request).export_csv(owner_id, form_id)
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(form["title"])}"'
        },
    )


@router.delete("/{response_id}", tags=["api/responses"])
async def api_delete_response(
    request: Request, response_id: str, owner_id: str = Depends(current_owner)
) -> JSONResponse:
    response_service(request).delete(owner_id, response_id)
    return JSONResponse({"message": "Response deleted successfully"})
