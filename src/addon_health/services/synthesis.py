"""Condition synthesis: merge degraded signals into one composite condition."""

from __future__ import annotations

from collections.abc import Sequence

from addon_health.domain.enums import ConditionStatus
from addon_health.domain.values import (
    AGENT_DEGRADED,
    DEPLOYED_REASON,
    CompositeCondition,
    DegradedSignal,
)

HEALTHY_MESSAGE = "Submariner ({version}) is deployed on managed cluster."


def synthesize(
    signals: Sequence[DegradedSignal],
    installed_version: str,
) -> CompositeCondition:
    """Build the ``AgentDegraded`` condition for one pass.

    With no signals the condition is ``False`` / ``Deployed`` and the message
    names *installed_version*.  Otherwise it is ``True``, the reason is the
    comma-joined reason codes and the message the newline-joined messages,
    both in signal order.
    """
    if not signals:
        return CompositeCondition(
            type=AGENT_DEGRADED,
            status=ConditionStatus.FALSE,
            reason=DEPLOYED_REASON,
            message=HEALTHY_MESSAGE.format(version=installed_version),
        )
    return CompositeCondition(
        type=AGENT_DEGRADED,
        status=ConditionStatus.TRUE,
        reason=",".join(s.reason for s in signals),
        message="\n".join(s.message for s in signals),
    )
