import pytest

from app.core.models.hierarchy import JurisdictionTier
from app.core.services.jurisdiction_ids import (
    InvalidJurisdictionId,
    JurisdictionScope,
    decode,
    encode,
)


def test_decode_state_id():
    assert decode("CA_STATE") == JurisdictionScope("CA", None)


def test_decode_county_id():
    assert decode("CA_COUNTY_LOS_ANGELES") == JurisdictionScope("CA", "LOS ANGELES")


def test_decode_bare_state_code():
    assert decode("CA") == JurisdictionScope("CA", None)


def test_decode_parent_type_state_wins_over_county_shape():
    assert decode("CA_COUNTY_LOS_ANGELES", "state") == JurisdictionScope("CA", None)


def test_decode_county_named_like_state_suffix_stays_county():
    assert decode("NY_COUNTY_STATEN_ISLAND") == JurisdictionScope("NY", "STATEN ISLAND")


def test_decode_unrecognized_shape_uses_first_two_characters():
    assert decode("TX_CITY_AUSTIN") == JurisdictionScope("TX", None)


def test_decode_normalizes_state_code_case():
    assert decode("ca_STATE").state_code == "CA"


@pytest.mark.parametrize("bad_id", ["", "   ", "X", "1_STATE", "9Z_COUNTY_KING"])
def test_decode_rejects_unresolvable_state_codes(bad_id):
    with pytest.raises(InvalidJurisdictionId):
        decode(bad_id)


def test_scope_tier():
    assert decode("CA_STATE").tier == JurisdictionTier.state
    assert decode("CA_COUNTY_ORANGE").tier == JurisdictionTier.county


def test_encode_forms():
    assert encode(JurisdictionTier.state, "ca") == "CA_STATE"
    assert encode(JurisdictionTier.county, "CA", "Los Angeles") == "CA_COUNTY_LOS_ANGELES"
    assert encode(JurisdictionTier.city, "CA", "San Luis  Obispo") == "CA_COUNTY_SAN_LUIS_OBISPO"
    assert encode("city", "CA") == "CA_STATE"


def test_encode_county_requires_name():
    with pytest.raises(InvalidJurisdictionId):
        encode(JurisdictionTier.county, "CA")


def test_decode_encode_round_trip_for_all_tiers():
    cases = [
        (JurisdictionTier.state, "CA", None),
        (JurisdictionTier.county, "CA", "LOS ANGELES"),
        (JurisdictionTier.county, "NY", "STATEN ISLAND"),
        (JurisdictionTier.city, "OR", "MULTNOMAH"),
        (JurisdictionTier.city, "AZ", None),
    ]
    for tier, state, county in cases:
        scope = decode(encode(tier, state, county))
        assert scope == JurisdictionScope(state, county)
