"""Provider-side exception types raised by `app.llm.client`.

Two failure shapes are distinguished:

- `ProviderError`: the provider answered and described the failure itself
  (a JSON `{"error": {...}}` body), or answered with a body this client
  cannot interpret.
- `UpstreamHTTPError`: the HTTP exchange failed without a provider error
  description (non-JSON error page, gateway timeout, connection failure).

The API layer maps both onto its own error taxonomy (`app.api.errors`).
"""


class ProviderError(Exception):
    """Provider-reported failure.

    Attributes:
        message: Provider error text (may be long; truncated by the API layer).
        status_code: HTTP status of the provider response, if any.
        error_code: Structured provider code (`error.code` / `error.type`),
            for example `insufficient_quota` or `invalid_api_key`.
    """

    def __init__(self, message: str, status_code: int | None = None, error_code: str | None = None):
        self.message = message or ""
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(self.message)


class UpstreamHTTPError(Exception):
    """Raw HTTP failure from the transport layer.

    `status_code` is `None` when no response was received at all.
    """

    def __init__(self, status_code: int | None, body: str = ""):
        self.status_code = status_code
        self.body = body or ""
        label = status_code if status_code is not None else "no response"
        super().__init__(f"HTTP {label}: {self.body}".strip())
