from datetime import date, datetime
import logging
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from ledgerbooks.exceptions import DuplicateVatReturnError, TaxAuthorityError
from ledgerbooks.models import Bill, HmrcToken, Invoice, VatObligation, VatReturn, utcnow
from ledgerbooks.vat.calculations import VatDocument, VatReturnBoxes, calculate_vat_return, to_submission_payload
from ledgerbooks.vat.client import HmrcVatClient

logger = logging.getLogger(__name__)

EXCLUDED_STATUSES = ("cancelled",)


def get_access_token(db: Session, user_id: str) -> str:
    token = db.query(HmrcToken).filter(HmrcToken.user_id == user_id).first()
    if token is None:
        raise TaxAuthorityError("No HMRC connection. Authorise access to Making Tax Digital first.")
    if token.expires_at <= utcnow():
        raise TaxAuthorityError("HMRC access token has expired. Reconnect to Making Tax Digital.")
    return token.access_token


def build_client(db: Session, user_id: str) -> HmrcVatClient:
    return HmrcVatClient(access_token=lambda: get_access_token(db, user_id))


def _documents(db: Session, model, user_id: str, date_from: date, date_to: date) -> List[VatDocument]:
    rows = (
        db.query(model.date, model.vat_amount, model.total)
        .filter(
            model.user_id == user_id,
            model.status.notin_(EXCLUDED_STATUSES),
            model.date >= date_from,
            model.date <= date_to,
        )
        .all()
    )
    return [VatDocument(date=row.date, vat_amount=row.vat_amount, total=row.total) for row in rows]


def get_vat_return(db: Session, user_id: str, date_from: date, date_to: date) -> VatReturnBoxes:
    if date_from > date_to:
        raise ValueError("date_from must be on or before date_to.")
    invoices = _documents(db, Invoice, user_id, date_from, date_to)
    bills = _documents(db, Bill, user_id, date_from, date_to)
    return calculate_vat_return(invoices, bills, date_from, date_to)


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(value[:10])


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)


def list_obligations(db: Session, user_id: str, status: Optional[str] = None) -> Sequence[VatObligation]:
    query = db.query(VatObligation).filter(VatObligation.user_id == user_id)
    if status:
        query = query.filter(VatObligation.status == status)
    return query.order_by(VatObligation.start_date.asc()).all()


def sync_obligations(
    db: Session,
    user_id: str,
    vrn: str,
    date_from: date,
    date_to: date,
    status: Optional[str] = None,
    client: Optional[HmrcVatClient] = None,
) -> List[VatObligation]:
    client = client or build_client(db, user_id)
    details = client.get_obligations(vrn, date_from, date_to, status)
    synced: List[VatObligation] = []
    for detail in details:
        obligation = (
            db.query(VatObligation)
            .filter(VatObligation.user_id == user_id, VatObligation.period_key == detail["periodKey"])
            .first()
        )
        if obligation is None:
            obligation = VatObligation(user_id=user_id, period_key=detail["periodKey"])
            db.add(obligation)
        obligation.start_date = _parse_date(detail["start"])
        obligation.end_date = _parse_date(detail["end"])
        obligation.due_date = _parse_date(detail["due"])
        obligation.status = detail.get("status", "O")
        obligation.received_date = _parse_datetime(detail.get("received"))
        synced.append(obligation)
    db.flush()
    logger.info("Synced %s VAT obligations", len(synced))
    return synced


def get_obligation(db: Session, user_id: str, period_key: str) -> Optional[VatObligation]:
    return (
        db.query(VatObligation)
        .filter(VatObligation.user_id == user_id, VatObligation.period_key == period_key)
        .first()
    )


def submit_vat_return(
    db: Session,
    user_id: str,
    vrn: str,
    period_key: str,
    client: Optional[HmrcVatClient] = None,
) -> Tuple[VatReturn, VatReturnBoxes]:
    """File the return for one obligation period with HMRC and record the receipt.

    The boxes are computed over the obligation's own start and end dates. A
    period that already has a stored return is refused before any network call.
    """
    obligation = get_obligation(db, user_id, period_key)
    if obligation is None:
        raise ValueError("VAT obligation not found.")
    existing = (
        db.query(VatReturn.id)
        .filter(VatReturn.user_id == user_id, VatReturn.period_key == period_key)
        .first()
    )
    if existing is not None or obligation.status == "F":
        raise DuplicateVatReturnError(period_key)

    boxes = get_vat_return(db, user_id, obligation.start_date, obligation.end_date)
    client = client or build_client(db, user_id)
    receipt = client.submit_return(vrn, to_submission_payload(period_key, boxes))

    vat_return = VatReturn(
        user_id=user_id,
        obligation_id=obligation.id,
        period_key=period_key,
        vat_due_sales=boxes.box1,
        vat_due_acquisitions=boxes.box2,
        total_vat_due=boxes.box3,
        vat_reclaimed_curr_period=boxes.box4,
        net_vat_due=boxes.box5,
        total_value_sales_ex_vat=boxes.box6,
        total_value_purchases_ex_vat=boxes.box7,
        total_value_goods_supplied_ex_vat=boxes.box8,
        total_acquisitions_ex_vat=boxes.box9,
        hmrc_processing_date=receipt.get("processingDate"),
        hmrc_form_bundle_number=receipt.get("formBundleNumber"),
    )
    db.add(vat_return)
    obligation.status = "F"
    obligation.received_date = utcnow()
    db.flush()
    logger.info(
        "Submitted VAT return period=%s form_bundle=%s net_vat_due=%s",
        period_key,
        vat_return.hmrc_form_bundle_number,
        boxes.box5,
    )
    return vat_return, boxes
