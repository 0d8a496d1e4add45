"""
Condition scanner: deadline rules and the async scanning service.
"""

from poam_alerts.scanner.rules import DeadlineRules, days_overdue, days_until
from poam_alerts.scanner.service import ConditionScanner

__all__ = [
    "DeadlineRules",
    "days_overdue",
    "days_until",
    "ConditionScanner",
]
