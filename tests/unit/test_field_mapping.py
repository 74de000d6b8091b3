from identity_admin.core.field_mapping import (
    DELETABLE_USER_FIELDS,
    PROJECT_CONFIG_RENAMES,
    UPDATE_USER_RENAMES,
    USER_RENAMES,
    USER_WRITE_KEYS,
    from_wire,
    generate_update_mask,
    invert,
    to_wire,
)


def _update(properties):
    return to_wire(
        properties,
        UPDATE_USER_RENAMES,
        deletable=DELETABLE_USER_FIELDS,
        accepted_keys=USER_WRITE_KEYS,
    )


class TestToWire:
    def test_none_values_become_delete_attribute(self):
        wire = _update({"display_name": None, "photo_url": None})
        assert wire == {"deleteAttribute": ["DISPLAY_NAME", "PHOTO_URL"]}

    def test_phone_number_is_not_deletable(self):
        assert "phone_number" not in DELETABLE_USER_FIELDS
        assert _update({"phone_number": None}) == {"phoneNumber": None}

    def test_absent_fields_produce_no_delete_attribute(self):
        wire = _update({"email": "a@b.co"})
        assert wire == {"email": "a@b.co"}
        assert "deleteAttribute" not in wire

    def test_mixed_set_and_delete(self):
        wire = _update({"display_name": None, "photo_url": "https://example.com/p.png"})
        assert wire == {"photoUrl": "https://example.com/p.png", "deleteAttribute": ["DISPLAY_NAME"]}

    def test_update_renames_disabled_to_disable_user(self):
        wire = _update({"disabled": True, "uid": "abc", "email_verified": False})
        assert wire == {"disableUser": True, "localId": "abc", "emailVerified": False}

    def test_create_keeps_disabled_name(self):
        wire = to_wire({"disabled": True}, USER_RENAMES, accepted_keys=USER_WRITE_KEYS)
        assert wire == {"disabled": True}

    def test_unknown_keys_are_stripped(self):
        wire = _update({"email": "a@b.co", "favourite_colour": "blue"})
        assert wire == {"email": "a@b.co"}

    def test_input_is_not_mutated(self):
        properties = {"display_name": None, "email": "a@b.co"}
        _update(properties)
        assert properties == {"display_name": None, "email": "a@b.co"}

    def test_without_deletable_table_none_passes_through(self):
        wire = to_wire({"display_name": None}, USER_RENAMES)
        assert wire == {"displayName": None}


class TestFromWire:
    def test_renames_back_to_public_names(self):
        props = from_wire(
            {"localId": "abc", "photoUrl": "https://x/y", "unknownField": 1},
            USER_RENAMES,
        )
        assert props == {"uid": "abc", "photo_url": "https://x/y", "unknownField": 1}

    def test_project_config_mfa_name(self):
        assert from_wire({"mfa": {"state": "ENABLED"}}, PROJECT_CONFIG_RENAMES) == {
            "multi_factor_config": {"state": "ENABLED"}
        }

    def test_invert(self):
        assert invert({"a": "b"}) == {"b": "a"}

    def test_update_round_trip_restores_non_deleted_fields(self):
        properties = {
            "uid": "abc",
            "display_name": None,
            "photo_url": "https://example.com/p.png",
            "disabled": True,
            "email_verified": False,
        }
        restored = from_wire(_update(properties), UPDATE_USER_RENAMES)
        for key, value in properties.items():
            if value is not None:
                assert restored[key] == value
        assert "display_name" not in restored
        assert restored["deleteAttribute"] == ["DISPLAY_NAME"]


class TestGenerateUpdateMask:
    def test_nested_paths(self):
        mask = generate_update_mask({
            "displayName": "acme",
            "mfaConfig": {"state": "ENABLED", "factorIds": ["phone"]},
        })
        assert mask == ["displayName", "mfaConfig.state", "mfaConfig.factorIds"]

    def test_terminal_path_is_not_expanded(self):
        mask = generate_update_mask(
            {"testPhoneNumbers": {"+16505550001": "123456"}},
            terminal_paths=["testPhoneNumbers"],
        )
        assert mask == ["testPhoneNumbers"]

    def test_empty_nested_object_is_listed(self):
        assert generate_update_mask({"mfaConfig": {}}) == ["mfaConfig"]

    def test_non_mapping_yields_empty_mask(self):
        assert generate_update_mask(None) == []
