"""Router that serves each route with and without a trailing slash."""

from typing import Any, Callable

from fastapi import APIRouter
from fastapi.types import DecoratedCallable


class TrailingSlashRouter(APIRouter):
    """APIRouter that also registers the slash-less variant of every path.

    ``@router.get("/")`` then answers both ``/api/v1/sites`` and
    ``/api/v1/sites/`` without a redirect.
    """

    def api_route(
        self, path: str, *, include_in_schema: bool = True, **kwargs: Any
    ) -> Callable[[DecoratedCallable], DecoratedCallable]:
        """Register ``path`` and its alternate trailing-slash form."""
        if path.endswith("/") and len(path) > 1:
            alternate_path = path[:-1]
        elif path == "/":
            alternate_path = ""
        else:
            alternate_path = path + "/"

        add_path = super().api_route(path, include_in_schema=include_in_schema, **kwargs)
        add_alternate_path = super().api_route(
            alternate_path, include_in_schema=False, **kwargs
        )

        def decorator(func: DecoratedCallable) -> DecoratedCallable:
            add_alternate_path(func)
            return add_path(func)

        return decorator
