"""Invoice router - FastAPI endpoints for invoices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from .schemas import InvoiceCreate, InvoiceResponse, invoice_response
from .service import InvoiceService

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    status: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return [invoice_response(i) for i in service.list_invoices(actor, status)]


@router.post("", response_model=InvoiceResponse, status_code=201)
async def create_invoice(
    data: InvoiceCreate,
    actor: Actor = Depends(get_current_actor),
    service: InvoiceService = Depends(get_invoice_service),
):
    return invoice_response(service.create_invoice(data, actor))


@router.get("/{invoice_id}/download")
async def download_invoice(
    invoice_id: int,
    actor: Actor = Depends(get_current_actor),
    service: InvoiceService = Depends(get_invoice_service),
):
    filename, pdf_bytes = service.download_invoice(invoice_id, actor)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
