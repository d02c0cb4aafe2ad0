#!/usr/bin/env python3
"""
Promote a user to SUPER_ADMIN by phone number.

The account must already exist (log in once with the phone first). Any local
or international format of the number is accepted.

Usage:
    python promote_super_admin.py +250788000000
"""

import sys

from weshare.admin.service import AdminManagementService
from weshare.database import SessionLocal
from weshare.exceptions import NotFound

DEFAULT_PHONE = "+250788000000"


def promote(phone: str) -> int:
    db = SessionLocal()
    try:
        user, changed = AdminManagementService(db).promote_super_admin(phone)
    except NotFound as e:
        print(f"❌ {e.message}")
        return 1
    finally:
        db.close()

    if not changed:
        print(f"✅ {user.name} ({user.phone}) is already SUPER_ADMIN.")
        return 0

    print(f"✅ Promoted {user.name} ({user.phone}) to SUPER_ADMIN.")
    print("   Log out and log back in to see admin features.")
    return 0


if __name__ == "__main__":
    sys.exit(promote(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_PHONE))
