import pytest

from linkrotator.core.slugs import generate_blog_slug, generate_prelanding_key, to_base36
from linkrotator.utils.geo import get_geo_data, is_private_ip
from linkrotator.utils.validators import is_valid_url


def test_to_base36():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    with pytest.raises(ValueError):
        to_base36(-1)


def test_prelanding_key():
    assert generate_prelanding_key("Summer Deal!", now_ms=36) == "summer-deal-10"
    assert generate_prelanding_key("!!!", now_ms=35) == "z"


def test_blog_slug():
    assert generate_blog_slug("  Ten Tips:  Save  Money ") == "ten-tips-save-money"


@pytest.mark.parametrize("url, valid", [
    ("https://example.com/path?q=1", True),
    ("http://example10.com", True),
    ("https://8.8.8.8/", True),
    ("ftp://example.com/file", False),
    ("javascript:alert(1)", False),
    ("http://localhost:8000", False),
    ("http://127.0.0.1/", False),
    ("http://10.0.0.5/", False),
    ("", False),
])
def test_is_valid_url(url, valid):
    assert is_valid_url(url)[0] is valid


def test_private_ips_skip_lookup():
    assert is_private_ip("192.168.1.1")
    assert is_private_ip("unknown")
    assert is_private_ip("127.0.0.1")
    assert not is_private_ip("8.8.8.8")
    assert get_geo_data("10.0.0.1").country_name is None


def test_disabled_lookup_returns_empty():
    assert get_geo_data("8.8.8.8", enabled=False).country_name is None


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "Minglemoody"}
    assert "x-process-time" in response.headers
