"""
Receipt and Order Utility Endpoints
"""

from dataclasses import asdict

from fastapi import APIRouter

from nuacha.schemas.expense import DateValidationRequest, DateValidationResponse, OrderReferenceResponse
from nuacha.services.date_validation import validate_and_correct_ocr_date
from nuacha.services.order_reference import generate_order_reference

router = APIRouter()

@router.post("/receipts/validate-date", response_model=DateValidationResponse)
async def validate_receipt_date(request: DateValidationRequest):
    """
    Score a date read from a receipt and substitute a fallback if needed
    """
    result = validate_and_correct_ocr_date(request.date, image_timestamp=request.image_timestamp)
    return DateValidationResponse(**asdict(result))

@router.post("/orders/reference", response_model=OrderReferenceResponse)
async def create_order_reference():
    """
    Issue a new order reference number
    """
    return OrderReferenceResponse(reference=generate_order_reference())
