from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, List, Optional

from ledgerbooks.utils import to_decimal, within_tolerance


@dataclass(frozen=True)
class OpenDocument:
    id: int
    number: str
    party_name: Optional[str]
    total: Decimal


@dataclass
class MatchCandidate:
    type: str
    id: int
    number: str
    party_name: Optional[str]
    total: Decimal
    reasons: List[str] = field(default_factory=list)


def _mentioned(needle: Optional[str], haystack: str) -> bool:
    needle = (needle or "").strip().lower()
    return bool(needle) and needle in haystack


def _candidates(
    document_type: str,
    documents: Iterable[OpenDocument],
    expected_total: Decimal,
    description: str,
) -> List[MatchCandidate]:
    haystack = (description or "").lower()
    matches: List[MatchCandidate] = []
    for document in documents:
        reasons = []
        if within_tolerance(to_decimal(document.total), expected_total):
            reasons.append("amount")
        if _mentioned(document.number, haystack):
            reasons.append("number")
        if _mentioned(document.party_name, haystack):
            reasons.append("name")
        if reasons:
            matches.append(
                MatchCandidate(
                    type=document_type,
                    id=document.id,
                    number=document.number,
                    party_name=document.party_name,
                    total=to_decimal(document.total),
                    reasons=reasons,
                )
            )
    return matches


def suggest_matches(
    amount: Decimal,
    description: str,
    open_invoices: Iterable[OpenDocument],
    open_bills: Iterable[OpenDocument],
) -> List[MatchCandidate]:
    """Open invoices (money in) or bills (money out) that may settle a bank line.

    A document qualifies when its total agrees with the amount within a penny,
    or when its number or party name appears in the description. Candidates
    matching on more signals sort first. Zero amounts have no direction and
    get no suggestions.
    """
    amount = to_decimal(amount)
    if amount > 0:
        matches = _candidates("invoice", open_invoices, amount, description)
    elif amount < 0:
        matches = _candidates("bill", open_bills, -amount, description)
    else:
        return []
    return sorted(matches, key=lambda match: (-len(match.reasons), match.id))
