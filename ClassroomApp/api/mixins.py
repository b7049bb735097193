from typing import Any

from rest_framework import status
from rest_framework.response import Response

from ClassroomApp.core.errors import Result
from ClassroomApp.core.policy import Actor

class PaginationMixin:
    """Shared helper to reduce pagination boilerplate."""

    def paginate_and_respond(self, items, serializer_cls, many=True):
        page = self.paginate_queryset(items)
        serializer = serializer_cls(page if page is not None else items, many=many)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)


class ServiceResultMixin(PaginationMixin):
    """Turn domain ``Result`` objects into responses; failures become DRF exceptions."""

    def respond(self, result: Result, serializer_cls: Any = None, status_code: int = status.HTTP_200_OK) -> Response:
        value = result.unwrap()
        if serializer_cls is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(serializer_cls(value).data, status=status_code)

    def respond_list(self, result: Result, serializer_cls: Any) -> Response:
        return self.paginate_and_respond(result.unwrap(), serializer_cls)

    @property
    def actor(self) -> Actor:
        """The authenticated user reduced to what the policy needs."""
        return Actor.of(self.request.user)
