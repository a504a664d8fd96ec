from .local import bound_request


class AuditRequestMiddleware:
    """Binds each request so ``log_action`` can fill in actor, IP and user agent."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        with bound_request(request):
            return self.get_response(request)
