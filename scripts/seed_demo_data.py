#!/usr/bin/env python3
"""
Report Portal — Demo Seed.

Resets organizations, users and reports to the demo data set and prints the
login credentials.

Usage:
    python scripts/seed_demo_data.py              # Uses development DB
    python scripts/seed_demo_data.py --env production

Destructive: every existing report, user and organization is deleted.
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from report_portal import create_app
from report_portal.services.seed_service import DEMO_USERS, seed_demo_data

logger = logging.getLogger("seed_demo_data")


def main():
    parser = argparse.ArgumentParser(description="Seed the report portal demo data")
    parser.add_argument("--env", default=os.getenv("APP_ENV", "development"),
                        choices=["development", "production"])
    args = parser.parse_args()

    app = create_app(args.env)
    with app.app_context():
        counts = seed_demo_data()

    logger.info("Database initialized: %s", counts)
    logger.info("Login credentials:")
    for _name, _email, username, password, role, _org in DEMO_USERS:
        logger.info("  %-18s username: %-8s password: %s", role, username, password)


if __name__ == "__main__":
    main()
