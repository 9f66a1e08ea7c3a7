from __future__ import annotations

# Equity decay (unit: years until equity is consumed)
DECAY_CRITICAL_YEARS = 5.0
DECAY_WARNING_YEARS = 10.0

# Day-count conventions
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30          # uniform month used by decay and event-mode yield
MONTHS_PER_YEAR = 12

# Pruning (unit: days until disposal deadline)
PRUNING_CRITICAL_DAYS = 90
PRUNING_HIGH_DAYS = 180
URGENCY_RANK = {"CRITICAL": 0, "HIGH": 1, "MEDIUM": 2}

# Signal severities (0-10, higher sorts first)
SEVERITY_CRITICAL = 9
SEVERITY_HIGH = 7
SEVERITY_WARNING = 5
