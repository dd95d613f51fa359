# orders/services/stripe.py
from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from decimal import Decimal
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from django.conf import settings

from core.exceptions import PaymentGatewayError
from core.money import to_minor_units

logger = logging.getLogger(__name__)

STRIPE_BASE = "https://api.stripe.com/v1"


def _stripe_cfg() -> dict:
    payments = getattr(settings, "PAYMENTS", {}) or {}
    cfg = (payments.get("STRIPE") or {}) if isinstance(payments, dict) else {}
    return cfg if isinstance(cfg, dict) else {}


def _get_secret_key() -> str:
    sk = (_stripe_cfg().get("SECRET_KEY") or "").strip()
    if not sk:
        raise PaymentGatewayError(
            "Stripe SECRET_KEY is not configured. "
            "Expected settings.PAYMENTS['STRIPE']['SECRET_KEY'] (env STRIPE_SECRET_KEY)."
        )
    return sk


def get_publishable_key() -> str:
    return (_stripe_cfg().get("PUBLISHABLE_KEY") or "").strip()


def _safe_preview(text: str, limit: int = 800) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " …(truncated)"


def _flatten_form(data: dict, prefix: str = "") -> list[tuple[str, str]]:
    """
    Stripe expects form encoding with bracketed keys:
    {"metadata": {"order_id": "x"}} -> metadata[order_id]=x
    """
    out = []
    for key, value in data.items():
        full = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, dict):
            out.extend(_flatten_form(value, full))
        elif isinstance(value, (list, tuple)):
            for idx, item in enumerate(value):
                out.append((f"{full}[{idx}]", str(item)))
        elif isinstance(value, bool):
            out.append((full, "true" if value else "false"))
        elif value is not None:
            out.append((full, str(value)))
    return out


def _request_json(
    method: str,
    path: str,
    *,
    form: dict | None = None,
    idempotency_key: str = "",
    timeout: int = 25,
) -> dict[str, Any]:
    sk = _get_secret_key()
    data = urlencode(_flatten_form(form)).encode("utf-8") if form is not None else None

    headers = {
        "Authorization": f"Bearer {sk}",
        "Content-Type": "application/x-www-form-urlencoded",
        "Accept": "application/json",
    }
    if idempotency_key:
        headers["Idempotency-Key"] = idempotency_key

    req = Request(f"{STRIPE_BASE}{path}", data=data, headers=headers, method=method)

    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as e:
        raw = ""
        try:
            raw = e.read().decode("utf-8", errors="replace")
        except OSError:
            raw = ""
        message = _safe_preview(raw) or str(e)
        try:
            message = (json.loads(raw).get("error") or {}).get("message") or message
        except (ValueError, AttributeError):
            pass
        raise PaymentGatewayError(f"Stripe HTTPError: {e.code} {message}") from e
    except URLError as e:
        raise PaymentGatewayError(f"Stripe URLError: {e}") from e

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise PaymentGatewayError(f"Stripe returned non-JSON: {_safe_preview(raw)}") from e

    if not isinstance(parsed, dict):
        raise PaymentGatewayError("Stripe returned an unexpected payload")
    return parsed


def create_payment_intent(
    *,
    amount: Decimal,
    currency: str,
    receipt_email: str = "",
    metadata: dict | None = None,
    idempotency_key: str = "",
) -> dict:
    """
    Create a PaymentIntent for `amount` (major units, 2dp).

    Returns {"id", "client_secret", "amount", "currency", "status"}.
    """
    form: dict = {
        "amount": to_minor_units(amount),
        "currency": str(currency).lower(),
        "payment_method_types": list(_stripe_cfg().get("PAYMENT_METHOD_TYPES") or ["card"]),
    }
    if receipt_email:
        form["receipt_email"] = receipt_email
    if metadata:
        form["metadata"] = metadata

    parsed = _request_json(
        "POST", "/payment_intents", form=form, idempotency_key=idempotency_key
    )

    intent_id = str(parsed.get("id") or "")
    client_secret = str(parsed.get("client_secret") or "")
    if not intent_id or not client_secret:
        raise PaymentGatewayError("Stripe did not return a payment intent")

    logger.info(
        "Payment intent created",
        extra={"payment_intent_id": intent_id, "amount_minor": form["amount"]},
    )
    return {
        "id": intent_id,
        "client_secret": client_secret,
        "amount": parsed.get("amount"),
        "currency": parsed.get("currency"),
        "status": parsed.get("status"),
    }


def _parse_signature_header(header: str) -> tuple[str, list[str]]:
    timestamp = ""
    signatures = []
    for part in (header or "").split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1" and value:
            signatures.append(value)
    return timestamp, signatures


def compute_signature(*, payload: bytes, timestamp: str, secret: str) -> str:
    signed = f"{timestamp}.".encode("utf-8") + (payload or b"")
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def verify_stripe_signature(
    *, payload: bytes, header: str | None, secret: str | None = None, now: int | None = None
) -> bool:
    """
    Stripe-Signature: t=<unix>,v1=<hex hmac-sha256 of "<t>.<body>">
    Rejects stale timestamps (WEBHOOK_TOLERANCE_SECONDS, 0 disables the check).
    """
    secret = secret if secret is not None else (_stripe_cfg().get("WEBHOOK_SECRET") or "")
    if not header or not secret:
        return False

    timestamp, signatures = _parse_signature_header(header)
    if not timestamp or not signatures:
        return False

    tolerance = int(_stripe_cfg().get("WEBHOOK_TOLERANCE_SECONDS") or 0)
    if tolerance:
        try:
            age = abs((now if now is not None else int(time.time())) - int(timestamp))
        except ValueError:
            return False
        if age > tolerance:
            logger.warning("Stripe signature timestamp outside tolerance", extra={"age": age})
            return False

    expected = compute_signature(payload=payload, timestamp=timestamp, secret=secret)
    return any(hmac.compare_digest(expected, sig) for sig in signatures)
