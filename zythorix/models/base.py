# zythorix/models/base.py

"""
Base module for SQLAlchemy models:
- declarative base class `Base`
- `BaseModel` mixin with to_dict()
- create_tables() used at application startup
"""

import logging

from sqlalchemy import inspect
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()


class BaseModel:
    """
    Mixin for SQLAlchemy models, adds to_dict().
    Keys are database column names, so attributes mapped to reserved words
    (e.g. Material.class_name -> "class") serialize under their column name.
    """
    def to_dict(self):
        return {
            attr.columns[0].name: getattr(self, attr.key)
            for attr in inspect(self).mapper.column_attrs
        }


def create_tables(engine):
    """
    Create every table declared on Base that does not exist yet
    """
    try:
        Base.metadata.create_all(engine)
        logger.info(f"✅ Database tables ready: {', '.join(sorted(Base.metadata.tables))}")
    except Exception as e:
        logger.error(f"❌ Error during database initialization: {str(e)}")
        raise
