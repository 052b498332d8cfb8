"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so metadata is complete before create_all/alembic
"""

from thaiat.models.app_setting import AppSetting  # noqa: F401
