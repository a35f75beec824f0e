"""Two-person verification policy.

The person who performed a physical step (loading a washer, unloading a
dryer, folding) should not be the one who verifies it. This is a nudge, not
a hard rule: a lone staff member on shift must still be able to proceed, so
a same-person attempt yields a ``RequireConfirmation`` result that the caller
re-submits with ``force_same_person=True`` after explicit confirmation.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError

MIN_INITIALS_LENGTH = 2


@dataclass(frozen=True)
class Approved:
    """Verification passed; the caller may apply the change."""

    requires_confirmation: bool = False


@dataclass(frozen=True)
class RequireConfirmation:
    """Soft block: the verifier also performed the step being verified."""

    action: str
    message: str
    performed_by: str
    requires_confirmation: bool = True


APPROVED = Approved()


def same_person(performed_by: str | None, attempted_by: str | None) -> bool:
    if not performed_by or not attempted_by:
        return False
    return performed_by.strip().casefold() == attempted_by.strip().casefold()


def verify(
    performed_by: str | None,
    attempted_by: str,
    force_override: bool = False,
    action: str = "performed this step for",
) -> Approved | RequireConfirmation:
    """Compare the verifier against the performer of ``action``.

    ``action`` completes the sentence "You ... this order", e.g.
    ``"loaded Washer 3 for"`` or ``"transferred"``.
    """
    if force_override or not same_person(performed_by, attempted_by):
        return APPROVED

    return RequireConfirmation(
        action=action,
        message=(
            f"You {action} this order. Ideally another person should verify. "
            "Are you sure you want to verify your own work?"
        ),
        performed_by=performed_by,
    )


def initials_for(name: str, initials: str | None = None) -> str:
    """Resolve display initials for an actor.

    Explicit initials are trimmed and upper-cased and must have at least two
    characters. Otherwise they are derived from the name: first letters of
    the first and last word, or the first two characters of a single word.
    """
    if initials is not None and initials.strip():
        cleaned = initials.strip().upper()
        if len(cleaned) < MIN_INITIALS_LENGTH:
            raise ValidationError({"initials": [f"Initials must be at least {MIN_INITIALS_LENGTH} characters"]})
        return cleaned

    parts = (name or "").split()
    if len(parts) >= 2:
        return f"{parts[0][0]}{parts[-1][0]}".upper()
    return (name or "").strip()[:2].upper()
