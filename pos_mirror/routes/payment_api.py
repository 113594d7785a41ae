import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..relay import BroadcastRelay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["payment"])

SUCCESS_STATUSES = ("SUCCESS", "COMPLETED")


def _relay(request: Request) -> BroadcastRelay:
    return request.app.state.relay


def popup_id_for(transaction_uuid: str) -> str:
    return f"payment_modal_{transaction_uuid}"


@router.post("/popup/close")
async def popup_close(request: Request, payload: dict):
    transaction_uuid = str(payload.get("transactionUuid") or "").strip()
    popup_id = str(payload.get("popupId") or "").strip()
    machine_id = str(payload.get("machineId") or "").strip() or None

    if not transaction_uuid or not popup_id:
        return JSONResponse({"error": "transactionUuid and popupId are required"}, status_code=400)

    await _relay(request).broadcast_popup_close(
        True, transaction_uuid=transaction_uuid, popup_id=popup_id, machine_id=machine_id
    )
    return {
        "success": True,
        "message": "Popup close signal sent",
        "transactionUuid": transaction_uuid,
        "popupId": popup_id,
        "targetMachineId": machine_id or "all",
    }


@router.post("/NotifyPos/ReceiveNotify")
async def receive_notify(request: Request, payload: dict):
    transaction_uuid = str(payload.get("TransactionUuid") or "").strip()
    logger.info("payment notification received for %r", transaction_uuid)

    if not transaction_uuid:
        return JSONResponse({"error": "TransactionUuid is required"}, status_code=400)

    popup_id = popup_id_for(transaction_uuid)
    relay = _relay(request)
    await relay.broadcast_popup_close(True, transaction_uuid=transaction_uuid, popup_id=popup_id)
    await relay.broadcast_payment_success(transaction_uuid)
    return {
        "message": "Notification received successfully.",
        "success": True,
        "transactionUuid": transaction_uuid,
        "popupId": popup_id,
    }


@router.post("/webhook/payment-success")
async def payment_success_webhook(request: Request, payload: dict):
    transaction_uuid = str(payload.get("transactionUuid") or "").strip()
    status = str(payload.get("status") or "").strip().upper()

    if not transaction_uuid:
        return JSONResponse({"success": False, "error": "transactionUuid is required"}, status_code=400)
    if status not in SUCCESS_STATUSES:
        return JSONResponse({"success": False, "message": "Payment not successful"}, status_code=400)

    relay = _relay(request)
    await relay.broadcast_popup_close(
        True, transaction_uuid=transaction_uuid, popup_id=popup_id_for(transaction_uuid)
    )
    await relay.broadcast_payment_success(transaction_uuid)
    return {"success": True, "message": "Payment processed and popup closed"}
