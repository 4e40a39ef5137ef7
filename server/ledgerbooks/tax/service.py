from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from ledgerbooks.models import TaxCode


def resolve_tax_rates(db: Session, user_id: str, tax_code_ids: Iterable[Optional[int]]) -> Dict[int, Decimal]:
    wanted = {tax_code_id for tax_code_id in tax_code_ids if tax_code_id is not None}
    if not wanted:
        return {}
    rows = db.query(TaxCode.id, TaxCode.rate).filter(TaxCode.user_id == user_id, TaxCode.id.in_(wanted)).all()
    rates = {tax_code_id: Decimal(rate) for tax_code_id, rate in rows}
    missing = wanted - set(rates)
    if missing:
        raise ValueError(f"Tax code(s) not found: {', '.join(str(i) for i in sorted(missing))}.")
    return rates
