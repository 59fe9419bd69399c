from typing import Annotated, Optional

from pydantic import AnyUrl, TypeAdapter, UrlConstraints, ValidationError

# HttpUrl caps length at 2083; long URLs are exactly what gets shortened
HttpLink = Annotated[AnyUrl, UrlConstraints(allowed_schemes=["http", "https"], host_required=True)]

_http_url = TypeAdapter(HttpLink)


def is_valid_http_url(value: Optional[str]) -> bool:
    """Absolute http or https URL with a host, of any length."""
    if not value or not isinstance(value, str):
        return False
    try:
        _http_url.validate_python(value)
    except ValidationError:
        return False
    return True
