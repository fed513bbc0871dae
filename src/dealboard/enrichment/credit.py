"""Split-credit allocation between the participants of a deal."""

from typing import Any, Optional

from dealboard.models.deal import Deal, SplitCredit

FULL_CREDIT = SplitCredit(has_credit=True, credit_percentage=100, split_with_id=None)
NO_CREDIT = SplitCredit(has_credit=False, credit_percentage=0, split_with_id=None)

SPLIT_PERCENTAGE = 50


def credit_shares(deal: Deal) -> list[tuple[str, int]]:
    """
    Weighted participant list for a deal: [(participant_id, percentage)].
    Blank ids are left out so they can never earn credit. A split deal that
    names only one distinct participant gives that participant everything.
    """
    if not deal.is_split_deal:
        return [(deal.primary_participant_id, 100)] if deal.primary_participant_id else []
    ids: list[str] = []
    for pid in (deal.primary_participant_id, deal.secondary_participant_id or ""):
        if pid and pid not in ids:
            ids.append(pid)
    if len(ids) == 1:
        return [(ids[0], 100)]
    return [(pid, SPLIT_PERCENTAGE) for pid in ids]


def allocate(deal: Deal, participant_id: Any) -> SplitCredit:
    """Credit the given participant holds on the deal."""
    if participant_id is None:
        return NO_CREDIT
    pid = str(participant_id).strip()
    if not pid:
        return NO_CREDIT
    shares = credit_shares(deal)
    for share_id, percentage in shares:
        if share_id == pid:
            return SplitCredit(
                has_credit=True,
                credit_percentage=percentage,
                split_with_id=_split_partner(deal, pid),
            )
    if deal.is_split_deal:
        return SplitCredit(
            has_credit=False,
            credit_percentage=0,
            split_with_id=_split_partner(deal, pid),
        )
    return NO_CREDIT


def _split_partner(deal: Deal, participant_id: str) -> Optional[str]:
    if not deal.is_split_deal:
        return None
    if deal.primary_participant_id == participant_id:
        partner = deal.secondary_participant_id
    else:
        partner = deal.primary_participant_id
    if not partner or partner == participant_id:
        return None
    return partner
