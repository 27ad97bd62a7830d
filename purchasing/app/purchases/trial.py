"""Trial eligibility for a plan on a host."""
from __future__ import annotations

from .contracts import Host
from .models import Plan


def calculate_trial(plan: Plan, host: Host) -> bool:
    """Return whether ``plan`` grants a trial on ``host``.

    When the package's trial was already consumed on the host, the plan's
    ``trial_days`` is reset to zero so downstream pricing charges in full.
    """

    if not plan.trial_days:
        return False

    if plan.package.trial_consumed(host):
        plan.trial_days = 0
        return False

    return True
