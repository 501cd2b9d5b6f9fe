# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Alembic environment – runs migrations on the application's own engine.

The connection string therefore comes from DATABASE_URL / etc/app.conf via
the Settings class, and there is exactly one place that builds an engine.

    alembic upgrade head        (run from the project root)
"""

import os
import sys

# ``backend/`` holds the top-level packages (core, models, …)
_BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from alembic import context  # noqa: E402

from core.config import settings  # noqa: E402
from database import Base, engine  # noqa: E402

# Every ORM model must be imported so Base.metadata is complete for
# ``alembic revision --autogenerate``.
import models.user     # noqa: F401, E402
import models.session  # noqa: F401, E402


def run_migrations_online():
    with engine.connect() as conn:
        context.configure(connection=conn, target_metadata=Base.metadata)
        with context.begin_transaction():
            context.run_migrations()


def run_migrations_offline():
    # Emits SQL to stdout without connecting
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
