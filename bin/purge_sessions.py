# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Maintenance script – deletes every session whose expiry has passed.

Expired sessions are already rejected by the API; this only keeps the
sessions table small.  Run it from cron, e.g. hourly:
    python bin/purge_sessions.py

Reads DATABASE_URL and SECRET_KEY from etc/app.conf like the application.
"""

import os
import sys

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/purge_sessions.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from auth.service import AuthService                      # noqa: E402
from core.errors import StorageError                      # noqa: E402
from core.logger import logger                            # noqa: E402
from core.security import password_hasher, token_issuer   # noqa: E402
from database import SessionLocal                         # noqa: E402
from stores.credential_store import SqlCredentialStore    # noqa: E402
from stores.session_store import SqlSessionStore          # noqa: E402


def purge() -> int:
    db = SessionLocal()
    try:
        service = AuthService(
            credentials=SqlCredentialStore(db),
            sessions=SqlSessionStore(db),
            hasher=password_hasher,
            tokens=token_issuer,
        )
        return service.purge_expired_sessions()
    finally:
        db.close()


if __name__ == "__main__":
    try:
        count = purge()
    except StorageError:
        logger.error("[purge_sessions] purge failed – see log for details")
        sys.exit(1)
    print(f"[purge_sessions] {count} expired session(s) deleted.")
