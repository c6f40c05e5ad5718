import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

from access import errors

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    errors.NotFound: 404,
    errors.InvalidArgument: 400,
    errors.InvalidState: 409,
    errors.Expired: 410,
    errors.Mismatch: 400,
    errors.PermissionDenied: 403,
    errors.Unavailable: 503,
}


def _error(code, message, status):
    return Response({'ok': False, 'error': {'code': code, 'message': message}}, status=status)


def api_exception_handler(exc, context):
    if isinstance(exc, errors.AccessError):
        return _error(exc.code, exc.message, ERROR_STATUS.get(type(exc), 400))

    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("Unhandled error in %s", context.get('view').__class__.__name__, exc_info=exc)
        return _error('server_error', str(exc), 500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = 'invalid_argument' if isinstance(exc, drf_exceptions.ValidationError) else 'api_error'
    return _error(code, detail, resp.status_code)
