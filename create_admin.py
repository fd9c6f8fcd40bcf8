"""
Create an admin account.

Registration through the API defaults to the student role; use this script to
bootstrap the first administrator.

USAGE:
    python create_admin.py --email admin@example.com --password secret [--name "Exam Office"]
"""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys

from database.database import Base, SessionLocal, engine
from database.models import Role
from services import identity
from services.errors import ExamPortalError


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Create an admin account",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--password", required=True, help="At least 6 characters")
    parser.add_argument("--name", default="Admin", help="Display name")
    args = parser.parse_args(argv)

    if len(args.password) < 6:
        print("Password must be at least 6 characters")
        return 1

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user, _ = identity.register(db, args.name, args.email, args.password, Role.ADMIN)
    except ExamPortalError as e:
        print(f"Could not create admin: {e.message}")
        return 1
    finally:
        db.close()

    print(f"✓ Admin created: {user.email} (id={user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
