"""Consensus rules for choosing the authoritative ballot version of a table.

Everything here is pure: the resolver service loads attestations, hands the
per-version tallies to :func:`decide`, and persists the returned verdict.

Juries are a trusted minority. A single jury attestation is enough to close a
table that has only one candidate, and a jury majority overrides a larger
user majority by refusing to pick either. A jury tie blocks resolution
outright, even when users clearly prefer one of the tied versions.
"""
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from src.resolution.models import CaseStatus

# A single candidate closes with this many jury or user endorsements.
UNANIMITY_MIN_JURIES = 1
UNANIMITY_MIN_USERS = 3

REASON_NO_SUPPORT = "no support"
REASON_UNANIMITY = "unanimity threshold met"
REASON_BELOW_UNANIMITY = "below unanimity threshold, awaiting more endorsements"
REASON_INSUFFICIENT = "insufficient participation"
REASON_USER_MAJORITY = "user majority reached"
REASON_USER_MAJORITY_PENDING = "user majority below threshold, awaiting more endorsements"
REASON_NO_JURY_TIE = "tie or insufficient support, no juries present"
REASON_JURY_TIE = "jury tie"
REASON_USER_TIE_BROKEN = "user tie broken by jury majority"
REASON_USER_TIE_CONFLICT = "user tie; juries favor a different version"
REASON_CONFLICT = "jury majority conflicts with user majority"
REASON_MAJORITY = "majority reached"


@dataclass
class Tally:
    users: int = 0
    juries: int = 0

    @property
    def total(self) -> int:
        return self.users + self.juries


@dataclass(frozen=True)
class Verdict:
    status: CaseStatus
    rationale: str
    winner: Optional[Hashable] = None


def tally_support(endorsements: Iterable[Tuple[Hashable, bool]]) -> Dict[Hashable, Tally]:
    """Count supporting attestations per version.

    ``endorsements`` yields ``(version_id, is_jury)`` pairs, one per support
    attestation. Rejections must be filtered out by the caller.
    """
    tallies: Dict[Hashable, Tally] = {}
    for version_id, is_jury in endorsements:
        tally = tallies.setdefault(version_id, Tally())
        if is_jury:
            tally.juries += 1
        else:
            tally.users += 1
    return tallies


def leaders(tallies: Dict[Hashable, Tally], attr: str) -> List[Hashable]:
    """Versions tied for the maximum value of ``attr`` ("users" or "juries")."""
    if not tallies:
        return []
    best = max(getattr(t, attr) for t in tallies.values())
    return [vid for vid, t in tallies.items() if getattr(t, attr) == best]


def _decide_single(version_id: Hashable, tally: Tally) -> Verdict:
    if tally.juries >= UNANIMITY_MIN_JURIES or tally.users >= UNANIMITY_MIN_USERS:
        return Verdict(CaseStatus.FINAL, REASON_UNANIMITY, version_id)
    if tally.juries == 0 and 0 < tally.users < UNANIMITY_MIN_USERS:
        return Verdict(CaseStatus.PENDING, REASON_BELOW_UNANIMITY, version_id)
    return Verdict(CaseStatus.UNRESOLVED, REASON_INSUFFICIENT)


def _decide_without_juries(supported: Dict[Hashable, Tally]) -> Verdict:
    user_leaders = leaders(supported, "users")
    if len(user_leaders) == 1:
        leader = user_leaders[0]
        count = supported[leader].users
        if count >= UNANIMITY_MIN_USERS:
            return Verdict(CaseStatus.AGREED, REASON_USER_MAJORITY, leader)
        if count > 0:
            return Verdict(CaseStatus.PENDING, REASON_USER_MAJORITY_PENDING, leader)
    return Verdict(CaseStatus.UNRESOLVED, REASON_NO_JURY_TIE)


def _decide_with_juries(supported: Dict[Hashable, Tally]) -> Verdict:
    jury_leaders = leaders(supported, "juries")
    if len(jury_leaders) > 1:
        return Verdict(CaseStatus.UNRESOLVED, REASON_JURY_TIE)
    jury_winner = jury_leaders[0]

    user_leaders = leaders(supported, "users")
    if len(user_leaders) > 1:
        if jury_winner in user_leaders and supported[jury_winner].juries > 0:
            return Verdict(CaseStatus.AGREED, REASON_USER_TIE_BROKEN, jury_winner)
        return Verdict(CaseStatus.UNRESOLVED, REASON_USER_TIE_CONFLICT)

    if user_leaders[0] != jury_winner:
        return Verdict(CaseStatus.UNRESOLVED, REASON_CONFLICT)
    return Verdict(CaseStatus.AGREED, REASON_MAJORITY, jury_winner)


def decide(tallies: Dict[Hashable, Tally]) -> Verdict:
    supported = {vid: t for vid, t in tallies.items() if t.total > 0}
    if not supported:
        return Verdict(CaseStatus.UNRESOLVED, REASON_NO_SUPPORT)

    if len(supported) == 1:
        (version_id, tally), = supported.items()
        return _decide_single(version_id, tally)

    if sum(t.juries for t in supported.values()) == 0:
        return _decide_without_juries(supported)
    return _decide_with_juries(supported)
