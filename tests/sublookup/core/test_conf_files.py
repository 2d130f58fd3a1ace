import pytest

from sublookup.core.conf_files import (
    parse_org_config,
    parse_pin_map,
    parse_user_count_config,
    read_api_secret,
)
from sublookup.core.errors import CONFIG_MISSING, ConfigurationError
from sublookup.core.models import OrgConfig, UserCountConfig


def test_org_config_keeps_commas_in_details():
    conf = parse_org_config(" Beta College , Photography plan, 20GB\n")
    assert conf == OrgConfig(org_name="Beta College", subscription_details="Photography plan, 20GB")


@pytest.mark.parametrize("text", ["", "Alpha School", "Alpha School,", ",All Apps", "  ,  "])
def test_org_config_requires_both_parts(text):
    assert parse_org_config(text) is None


def test_user_count_config_reads_known_keys():
    conf = parse_user_count_config("udgr=150\nnaud = 10\nother=3\n")
    assert conf == UserCountConfig(udgr=150, naud=10)


def test_user_count_config_ignores_non_numeric_values():
    conf = parse_user_count_config("udgr=fast\nnaud=\n")
    assert conf == UserCountConfig()


def test_user_count_config_takes_leading_integer():
    assert parse_user_count_config("udgr=120%\n").udgr == 120


def test_pin_map_is_reverse_lookup():
    pins = parse_pin_map("admin=9999\ncarol=1234\nbroken\n=5555\ndave=\nerin=ab=cd\n")
    assert pins == {"9999": "admin", "1234": "carol", "ab=cd": "erin"}


def test_api_secret_is_trimmed(tmp_path):
    secret = tmp_path / "apipwd.conf"
    secret.write_text("  s3cret \n", encoding="utf-8")
    assert read_api_secret(secret) == "s3cret"


def test_api_secret_missing_or_empty_raises(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        read_api_secret(tmp_path / "apipwd.conf")
    assert excinfo.value.code == CONFIG_MISSING

    empty = tmp_path / "empty.conf"
    empty.write_text("\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        read_api_secret(empty)


def test_api_secret_not_utf8_raises_configuration_error(tmp_path):
    secret = tmp_path / "apipwd.conf"
    secret.write_bytes(b"\xff\xfe\xfa")
    with pytest.raises(ConfigurationError) as excinfo:
        read_api_secret(secret)
    assert excinfo.value.code == CONFIG_MISSING
