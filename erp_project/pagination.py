"""
List pagination shared by viewsets and function-based views.

Every paginated list has the same body:
{
    "success": true,
    "count": 42,
    "next": "http://host/casino/works/?page=3",
    "previous": "http://host/casino/works/?page=1",
    "results": [...]
}
"""
from functools import wraps

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardResultsSetPagination(PageNumberPagination):
    """
    Page-number pagination used as DRF's default.

    Query parameters: ``page`` (1-based) and ``page_size`` (capped at 100).
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100

    def get_paginated_response(self, data):
        return Response({
            'success': True,
            'count': self.page.paginator.count,
            'next': self.get_next_link(),
            'previous': self.get_previous_link(),
            'results': data,
        })


def auto_paginate(view_func):
    """
    Paginate a function-based view whose GET branch returns a plain list.

    Place it below the role decorators so denied requests never reach it:

        @api_view(['GET', 'POST'])
        @require_method_roles({'GET': None, 'POST': [Roles.ADMIN]})
        @auto_paginate
        def works_handler(request):
            if request.method == 'GET':
                return Response(WorkSerializer(queryset, many=True).data)
            ...

    Dict bodies (details, errors, create responses) pass through unchanged.
    """
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        response = view_func(request, *args, **kwargs)
        if request.method != 'GET' or not isinstance(response, Response):
            return response
        if not isinstance(response.data, list):
            return response

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(response.data, request)
        if page is None:
            return response
        return paginator.get_paginated_response(page)

    return wrapper
