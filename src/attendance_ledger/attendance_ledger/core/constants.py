"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from .enums import AttendanceStatus, Role

PERCENT_DECIMALS = 1
WEEK_DAYS = 7

# Saturday and Sunday (date.weekday())
WEEKEND_DAYS = frozenset({5, 6})

UNRESTRICTED_ROLES = frozenset({Role.ADMIN, Role.SUPERVISOR})

PRESENT_EQUIVALENT = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})
ABSENT_EQUIVALENT = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.JUSTIFIED})

STATUS_LETTERS = {
    AttendanceStatus.PRESENT: "P",
    AttendanceStatus.LATE: "T",
    AttendanceStatus.ABSENT: "F",
    AttendanceStatus.JUSTIFIED: "J",
}
