from fastapi import FastAPI
from pathlib import Path
from pydantic import BaseModel
import json
import os

app = FastAPI(title="Mock Payment Gateway", version="1.0.0")
# Support both local development and Docker
DATA_DIR = Path("/payment_stub") if os.path.exists("/payment_stub") else Path(__file__).resolve().parent / "data"


class VerifyPaymentBody(BaseModel):
    txRef: str
    userId: str


class ResolveAccountBody(BaseModel):
    accountNumber: str
    bankCode: str


def _load(name: str) -> dict:
    file = DATA_DIR / name
    return json.loads(file.read_text()) if file.exists() else {}


@app.get("/health")
def health(): return {"status": "ok"}


@app.post("/api/verify-payment")
def verify_payment(body: VerifyPaymentBody):
    # References listed under "failed" are reported unsuccessful; anything else passes
    if body.txRef in _load("payments.json").get("failed", []):
        return {"success": False}
    return {"success": True, "transactionId": f"FLW-{body.txRef[-12:]}"}


@app.post("/api/resolve-account")
def resolve_account(body: ResolveAccountBody):
    accounts = _load("accounts.json")
    entry = accounts.get(f"{body.bankCode}:{body.accountNumber}")
    if not entry:
        return {"success": False}
    return {"success": True, "accountName": entry["accountName"], "bankName": entry["bankName"]}
