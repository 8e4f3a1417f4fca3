#!/usr/bin/env python3
"""
Send (or log) the incubator reminder digest once.

For setups that prefer cron over the built-in scheduler:

    SCHEDULER_ENABLED=false python scripts/send_reminders.py [YYYY-MM-DD]
"""

import sys

# Add parent directory to path for imports
sys.path.insert(0, ".")

from hatchplan import create_app
from hatchplan.services.scheduler import send_daily_digest
from hatchplan.utils import parse_date


def main(argv):
    today = None
    if len(argv) > 1:
        today = parse_date(argv[1])
        if today is None:
            print(f"Invalid date: {argv[1]}")
            return 2

    app = create_app()
    reminders = send_daily_digest(app, today)

    for reminder in reminders:
        print(f"  {reminder.message}")
    print(f"{len(reminders)} reminder(s) due.")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
