import ipaddress
from urllib.parse import urlparse

ALLOWED_SCHEMES = ("http", "https")
BLOCKED_HOSTS = {"localhost", "0.0.0.0"}
MAX_URL_LENGTH = 2048


def _is_internal_host(hostname: str) -> bool:
    if hostname.lower() in BLOCKED_HOSTS:
        return True
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return address.is_private or address.is_loopback or address.is_link_local or address.is_unspecified


def is_valid_url(url: str) -> tuple[bool, str]:
    """
    Check that a URL is a public http(s) destination.

    Used for web result links and pre-landing redirects.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url:
        return False, "URL cannot be empty"
    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        return False, f"Invalid URL: {e}"

    if parsed.scheme not in ALLOWED_SCHEMES:
        return False, "Only HTTP and HTTPS URLs are allowed"
    if not hostname:
        return False, "Invalid URL format"
    if _is_internal_host(hostname):
        return False, "Internal/private URLs are not allowed"

    return True, ""


def get_client_ip(request) -> str:
    """
    Visitor IP: first hop of X-Forwarded-For, then X-Real-IP, then the
    socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else "unknown"
