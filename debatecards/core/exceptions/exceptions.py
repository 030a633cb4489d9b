from typing import Optional


class AppError(Exception):
    """Base class for all application-level errors."""
    status_code = 500


class DomainError(AppError):
    """Base for domain logic errors."""
    status_code = 400

class InvalidInputError(DomainError):
    def __init__(self, message: str = "Invalid url"):
        self.message = message
        super().__init__(self.message)

class InvalidTopicError(DomainError):
    def __init__(self, message: str = "Please provide a valid topic"):
        self.message = message
        super().__init__(self.message)



class InfrastructureError(AppError):
    """Base for infrastructure-related errors (network, external API, etc)."""
    pass

class ProbeError(InfrastructureError):
    """A single probe attempt failed; callers fall through to the next strategy."""
    def __init__(self, url: str, detail: str = ""):
        self.url = url
        self.message = f"Probe of '{url}' failed: {detail}"
        super().__init__(self.message)

class ProbeTimeoutError(ProbeError):
    pass

class ProbeNetworkError(ProbeError):
    pass

class ExternalAPIError(InfrastructureError):
    def __init__(self, service: str, detail: str = "", status_code: Optional[int] = None):
        self.service = service
        self.upstream_status = status_code
        self.message = f"Error with external service '{service}': {detail}"
        super().__init__(self.message)

class GatewayRateLimitedError(ExternalAPIError):
    status_code = 429

    def __init__(self, service: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(service, "rate limited", status_code=429)
        self.message = "Rate limits exceeded, please try again later."

class GatewayPaymentRequiredError(ExternalAPIError):
    status_code = 402

    def __init__(self, service: str):
        super().__init__(service, "payment required", status_code=402)
        self.message = "Payment required, please add funds to your AI workspace."

class GatewayNotConfiguredError(InfrastructureError):
    def __init__(self):
        self.message = "AI gateway not configured"
        super().__init__(self.message)

class InvalidGatewayResponseError(InfrastructureError):
    def __init__(self, message: str = "Invalid AI response format"):
        self.message = message
        super().__init__(self.message)
