from rest_framework.views import exception_handler


def api_exception_handler(exc, context):
    """DRF's handler, plus any ``extra`` fields the exception carries."""
    response = exception_handler(exc, context)
    extra = getattr(exc, "extra", None)
    if response is not None and extra and isinstance(response.data, dict):
        response.data.update(extra)
    return response
