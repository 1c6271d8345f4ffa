import functools

from sqlalchemy.exc import SQLAlchemyError

from src.app.repositories.errors import StoreError


def translate_store_errors(method):
    """Re-raise SQLAlchemy failures from an async repository method as StoreError"""

    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    return wrapper
