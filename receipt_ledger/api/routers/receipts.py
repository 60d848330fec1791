from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import RedirectResponse
from loguru import logger

from ..deps import (
    StatsResponse,
    UploadResponse,
    get_bill_store,
    get_pipeline,
    get_stats_store,
    to_upload_response,
)
from ...core.config import settings
from ...core.errors import MalformedAnalysisResult, UpstreamUnavailable
from ...services.pipeline import ReceiptPipeline
from ...services.storage.base import BillStoreBase, StatsStoreBase

router = APIRouter(prefix="/receipts", tags=["receipts"])


@router.post("/upload", response_model=UploadResponse)
async def upload_receipt(
    request: Request,
    file: UploadFile = File(None),
    pipeline: ReceiptPipeline = Depends(get_pipeline),
):
    """
    Analyze an uploaded receipt, store the bill and update running stats.

    Accepts either:
    - multipart/form-data with a "file" field
    - a raw image/PDF body with its Content-Type header

    Responds with the extracted bill, or redirects (303) to RESULTS_PAGE_URL
    when one is configured.
    """
    if file:
        content = await file.read()
        content_type = file.content_type
    elif request.headers.get("content-type", "").startswith("multipart/"):
        # The form was already parsed without a "file" field; the body stream is consumed
        raise HTTPException(status_code=422, detail="Multipart upload has no 'file' field")
    else:
        content = await request.body()
        content_type = request.headers.get("content-type")

    if not content:
        raise HTTPException(status_code=422, detail="No file provided (either multipart or raw body)")

    try:
        result = await run_in_threadpool(pipeline.process, content, content_type)
    except MalformedAnalysisResult as e:
        logger.error("Analysis result was malformed", error=e.message)
        raise HTTPException(status_code=502, detail=str(e))
    except UpstreamUnavailable as e:
        logger.error("Upstream service unavailable", service=e.service, error=e.message)
        raise HTTPException(status_code=503, detail=str(e))

    if settings.results_page_url:
        return RedirectResponse(settings.results_page_url, status_code=303)

    return to_upload_response(result.bill_id, result.invoice, result.increment, result.warning)


@router.get("/bills")
async def list_bills(store: BillStoreBase = Depends(get_bill_store)):
    """List all stored bills (newest first)"""
    try:
        bills = store.list_bills()
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"total": len(bills), "bills": bills}


@router.get("/bills/{bill_id}")
async def get_bill(bill_id: str, store: BillStoreBase = Depends(get_bill_store)):
    try:
        bill = store.get_bill(bill_id)
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    if not bill:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill


@router.get("/stats", response_model=StatsResponse)
async def get_stats(store: StatsStoreBase = Depends(get_stats_store)):
    """Running total amount and bill count across all processed receipts"""
    try:
        stats = store.get_stats()
    except UpstreamUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return StatsResponse(total_amount=stats.total_amount, total_bills=stats.total_bills)
