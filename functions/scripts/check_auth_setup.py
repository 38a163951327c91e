"""
CLI helper to check the hosted auth and database wiring.

Signs in with the given credentials (when provided), resolves the token back
to a user and prints how many rows of each table the backend can see.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.config import get_settings
from backend.context import AppContext
from shared import constants
from shared.errors import AppError

ROW_LIMIT = 10000


def count_rows(context: AppContext, user_id: str | None) -> dict[str, int]:
    db = context.db
    posts = db.list_posts(limit=ROW_LIMIT)
    return {
        constants.BLOG_POSTS_TABLE: len(posts),
        constants.BLOG_IMAGES_TABLE: sum(len(db.list_post_images(p.id)) for p in posts),
        constants.PDF_LIBRARY_TABLE: len(db.list_pdfs(limit=ROW_LIMIT)),
        constants.USER_PDF_PROGRESS_TABLE: len(db.list_progress(user_id)) if user_id else 0,
        constants.PDF_NOTES_TABLE: len(db.list_notes(limit=ROW_LIMIT)),
        constants.QUICK_REF_TABLE: len(db.list_quick_refs(limit=ROW_LIMIT)),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Check auth and table access")
    parser.add_argument("--email", default=os.environ.get("CHECK_AUTH_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("CHECK_AUTH_PASSWORD"))
    args = parser.parse_args()

    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        print("Missing SUPABASE_URL / SUPABASE_ANON_KEY; auth is in-memory only.")

    context = AppContext.from_settings(settings)
    user_id = None
    try:
        if args.email and args.password:
            print(f"1. Signing in as {args.email}...")
            try:
                session = context.auth.sign_in(args.email, args.password)
            except AppError as exc:
                print(f"   Sign-in failed: {exc.message}")
                return 1
            user = context.auth.get_current_user(session.access_token)
            if user is None:
                print("   Token did not resolve to a user")
                return 1
            user_id = user.id
            print(f"   Auth service is accessible (user {user.id})")
        else:
            print("1. No credentials given; skipping sign-in")

        print("2. Counting visible rows...")
        for table, count in count_rows(context, user_id).items():
            print(f"   {table}: {count}")
    finally:
        context.close()

    print("Check complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
