"""
Author signature matching and verification verdicts.

Names are compared as (surname, initials) signatures so that "Smith JA",
"Smith J" and "John A. Smith" all refer to the same person.

Two verification policies exist. They are never combined and they
disagree on partially overlapping author lists:

- "alignment" (default): the CV author list must match the external list
  position by position, up to the end of the CV list or an "et al." marker.
- "owner_position": only the CV owner is located in both lists; authorship is
  confirmed when the owner appears externally and position when both indexes
  agree.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from cv_checker.core.schemas import OwnerProfile, VerificationVerdict


# "Smith-Jones" -> "SmithJones", "O'Brien" -> "OBrien"
NON_LETTER_RE = re.compile(r"[^\w\s]|[\d_]")
ET_AL_RE = re.compile(r"et\.?\s*al\.?", re.I)


@dataclass(frozen=True)
class AuthorSignature:
    surname: str
    initials: str


def _expand_initials_cluster(tokens: List[str]) -> List[str]:
    # "Smith JA" -> "Smith J A"
    last = tokens[-1]
    if len(tokens) >= 2 and 2 <= len(last) <= 3 and last.isalpha() and last.isupper():
        return tokens[:-1] + list(last)
    return tokens


def author_signature(name: Optional[str], cv_form: bool = False) -> AuthorSignature:
    """
    Derive a signature from a rendered name.

    "Last F I" form when the final token is a single letter ("Smith J A"),
    otherwise "First Middle Last" form ("John A Smith").

    With `cv_form`, a trailing initials cluster is expanded first ("Smith JA").
    External names are never expanded, so "Jun LI" keeps surname "li".
    """
    tokens = NON_LETTER_RE.sub("", name or "").split()
    if not tokens:
        return AuthorSignature(surname="", initials="")
    if cv_form:
        tokens = _expand_initials_cluster(tokens)
    tokens = [t.lower() for t in tokens]

    if len(tokens) >= 2 and len(tokens[-1]) == 1:
        return AuthorSignature(surname=tokens[0], initials="".join(t[0] for t in tokens[1:]))
    return AuthorSignature(surname=tokens[-1], initials="".join(t[0] for t in tokens[:-1]))


def signatures_match(a: AuthorSignature, b: AuthorSignature) -> bool:
    if not a.surname or a.surname != b.surname:
        return False
    if not a.initials or not b.initials:
        return True
    return a.initials.startswith(b.initials) or b.initials.startswith(a.initials)


def is_et_al(name: Optional[str]) -> bool:
    return bool(ET_AL_RE.fullmatch((name or "").strip()))


def authors_align(cv_authors: Sequence[str], external_authors: Sequence[str]) -> bool:
    """
    Position-by-position comparison of the CV list against the external list.

    An "et al." entry in the CV ends the check successfully. The CV list may
    stop early; the external list may not.
    """
    if cv_authors and not external_authors:
        return False
    for idx, name in enumerate(cv_authors):
        if is_et_al(name):
            return True
        if idx >= len(external_authors):
            return False
        if not signatures_match(author_signature(name, cv_form=True), author_signature(external_authors[idx])):
            return False
    return True


def _first_mismatch(cv_authors: Sequence[str], external_authors: Sequence[str]) -> Optional[int]:
    for idx, name in enumerate(cv_authors):
        if is_et_al(name):
            return None
        if idx >= len(external_authors):
            return idx
        if not signatures_match(author_signature(name, cv_form=True), author_signature(external_authors[idx])):
            return idx
    return None


def _unknown_verdict() -> VerificationVerdict:
    return VerificationVerdict(
        authorship="unknown",
        position="unknown",
        status="warning",
        explanation="No external author data to verify.",
    )


def verify_alignment(cv_authors: Sequence[str], external_authors: Sequence[str]) -> VerificationVerdict:
    if not external_authors:
        return _unknown_verdict()
    if authors_align(cv_authors, external_authors):
        return VerificationVerdict(
            authorship="match",
            position="match",
            status="good",
            explanation="Author list and order align with the external record.",
        )

    idx = _first_mismatch(cv_authors, external_authors)
    if idx is not None and idx >= len(external_authors):
        detail = f"CV lists {len(cv_authors)} authors, external record has {len(external_authors)}."
    elif idx is not None:
        detail = f"Author {idx + 1} differs (CV: {cv_authors[idx]}, external: {external_authors[idx]})."
    else:
        detail = "Author lists do not align."
    return VerificationVerdict(authorship="mismatch", position="mismatch", status="bad", explanation=detail)


def owner_index(authors: Sequence[str], owner: OwnerProfile, cv_form: bool = False) -> int:
    """
    0-based index of the first author matching any rendering of the owner's name, or -1.

    Variants are read as CV-style names ("Doe RK"); `cv_form` applies to `authors`.
    """
    signatures = [author_signature(owner.full_name)]
    signatures += [author_signature(v, cv_form=True) for v in owner.variants if v]
    for idx, name in enumerate(authors):
        sig = author_signature(name, cv_form=cv_form)
        if not sig.surname:
            continue
        if any(signatures_match(sig, s) for s in signatures):
            return idx
    return -1


def verify_owner_position(
    cv_authors: Sequence[str],
    external_authors: Sequence[str],
    owner: OwnerProfile,
) -> VerificationVerdict:
    if not external_authors:
        return _unknown_verdict()

    external_idx = owner_index(external_authors, owner)
    if external_idx == -1:
        return VerificationVerdict(
            authorship="mismatch",
            position="mismatch",
            status="bad",
            explanation="Name not found in external author list.",
        )

    cv_idx = owner_index(cv_authors, owner, cv_form=True)
    if cv_idx == -1 or cv_idx == external_idx:
        return VerificationVerdict(
            authorship="match",
            position="match",
            status="good",
            explanation="Authorship and position align.",
        )
    return VerificationVerdict(
        authorship="match",
        position="mismatch",
        status="warning",
        explanation=f"Authorship found, but position differs (CV: {cv_idx + 1}, external: {external_idx + 1}).",
    )


def verify_publication(
    cv_authors: Sequence[str],
    external_authors: Sequence[str],
    policy: str = "alignment",
    owner: Optional[OwnerProfile] = None,
) -> VerificationVerdict:
    """Verdict for one record against its selected candidate's authors."""
    if policy == "alignment":
        return verify_alignment(cv_authors, external_authors)
    if policy == "owner_position":
        if owner is None:
            raise ValueError("owner_position policy needs the CV owner's profile")
        return verify_owner_position(cv_authors, external_authors, owner)
    raise ValueError(f"Unknown verification policy: {policy!r}")
