"""Step flow: the fixed, ordered intake steps and their proceed rules.

Pure functions with no external dependencies.
"""

import re
from dataclasses import dataclass

from intake.schemas.drafts import FormData

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

EMAIL_ERROR = "Please enter a valid email"


@dataclass(frozen=True)
class Step:
    """One intake step: a key, a display title and its required fields."""

    key: str
    title: str
    required: tuple[str, ...]
    check_email: bool = False


STEPS: tuple[Step, ...] = (
    Step(key="basics", title="Basics", required=("full_name", "email"), check_email=True),
    Step(key="concern", title="Main concern", required=("main_concern",)),
    Step(key="goals", title="Goals", required=("goals",)),
    Step(key="background", title="Background", required=("background",)),
)

LAST_STEP = len(STEPS) - 1


def is_valid_email(value: str) -> bool:
    """Return True if ``value`` has the shape local@domain.tld."""
    return bool(EMAIL_PATTERN.match(value or ""))


def clamp_step(step: int) -> int:
    """Clamp a step index into [0, LAST_STEP]."""
    return max(0, min(LAST_STEP, step))


def missing_fields(form: FormData, step: int) -> list[str]:
    """List the fields blocking ``step``, in declaration order.

    Required fields count as missing when empty after trimming. On a step that
    checks email shape, a non-empty but malformed email is reported too.
    Indices outside the step table have no requirements.
    """
    if not 0 <= step <= LAST_STEP:
        return []

    current = STEPS[step]
    missing = [name for name in current.required if not (getattr(form, name) or "").strip()]
    if current.check_email and "email" not in missing and not is_valid_email(form.email):
        missing.append("email")
    return missing


def can_proceed(form: FormData, step: int) -> bool:
    """Return True if ``form`` satisfies the requirements of ``step``.

    Pure function -- deterministic, no side effects.
    """
    return not missing_fields(form, step)


def email_error(value: str) -> str | None:
    """Inline hint for the email field, or None when the value is well formed."""
    return None if is_valid_email(value) else EMAIL_ERROR


def step_at(step: int) -> Step:
    return STEPS[clamp_step(step)]
