import json

import pytest

from cc_switch.errors import AliasError, ProfileNotFoundError, StorageError
from cc_switch.profiles import Profile, WriteMode, parse_u32, validate_alias
from cc_switch.store import ConfigurationStore


def make(alias, **kw):
    return Profile(alias, kw.pop("token", f"tok-{alias}"), kw.pop("url", "https://x"), **kw)


def test_load_missing_file_is_empty(tmp_path):
    path = tmp_path / "nested" / "configurations.json"
    store = ConfigurationStore.load(path)
    assert len(store) == 0
    assert store.claude_settings_dir is None
    assert store.default_storage_mode is None
    assert not path.exists()


def test_save_then_load_round_trip(tmp_path):
    path = tmp_path / "deep" / "dir" / "configurations.json"
    store = ConfigurationStore(path=path)
    store.add(make("alpha", model="m", max_thinking_tokens=0, api_timeout_ms=600000))
    store.add(make("beta", anthropic_default_haiku_model="h"))
    store.set_settings_dir("/custom/claude")
    store.set_default_mode(WriteMode.CONFIG)
    store.save()
    assert path.exists()

    loaded = ConfigurationStore.load(path)
    assert loaded == store
    assert loaded.get("alpha").max_thinking_tokens == 0


def test_saved_file_shape_omits_unset_optionals(tmp_path):
    path = tmp_path / "configurations.json"
    store = ConfigurationStore(path=path)
    store.add(make("alpha"))
    store.save()
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["configurations"]["alpha"] == {
        "alias_name": "alpha",
        "token": "tok-alpha",
        "url": "https://x",
    }
    assert raw["claude_settings_dir"] is None
    assert "default_storage_mode" not in raw


def test_add_overwrites_and_remove_reports():
    store = ConfigurationStore()
    store.add(make("alpha", url="a"))
    store.add(make("alpha", url="b"))
    assert len(store) == 1
    assert store.get("alpha").url == "b"
    assert store.remove("alpha") is True
    assert store.remove("alpha") is False
    assert store.get("alpha") is None


def test_sorted_profiles_order():
    store = ConfigurationStore()
    for alias in ("gamma", "alpha", "beta"):
        store.add(make(alias))
    assert store.aliases() == ["alpha", "beta", "gamma"]
    assert [p.alias_name for p in store.sorted_profiles()] == ["alpha", "beta", "gamma"]


def test_rename_or_update_missing_raises():
    store = ConfigurationStore()
    with pytest.raises(ProfileNotFoundError):
        store.rename_or_update("nope", make("x"))


def test_rename_drops_old_alias():
    store = ConfigurationStore()
    store.add(make("alpha"))
    store.rename_or_update("alpha", make("omega", token="t2"))
    assert store.get("alpha") is None
    assert store.get("omega").token == "t2"


def test_rename_onto_existing_alias_overwrites():
    store = ConfigurationStore()
    store.add(make("alpha", token="a"))
    store.add(make("beta", token="b"))
    store.rename_or_update("alpha", make("beta", token="a"))
    assert store.aliases() == ["beta"]
    assert store.get("beta").token == "a"


def test_update_in_place():
    store = ConfigurationStore()
    store.add(make("alpha"))
    store.rename_or_update("alpha", make("alpha", model="new"))
    assert store.get("alpha").model == "new"


def test_malformed_store_raises(tmp_path):
    path = tmp_path / "configurations.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError) as exc:
        ConfigurationStore.load(path)
    assert "Failed to parse" in str(exc.value)


def test_out_of_range_number_is_rejected(tmp_path):
    path = tmp_path / "configurations.json"
    bad = {"alias_name": "a", "token": "t", "url": "u", "api_timeout_ms": 2**32}
    path.write_text(json.dumps({"configurations": {"a": bad}}), encoding="utf-8")
    with pytest.raises(StorageError):
        ConfigurationStore.load(path)


def test_effective_mode_resolution():
    store = ConfigurationStore()
    assert store.effective_mode() is WriteMode.ENV
    store.set_default_mode(WriteMode.CONFIG)
    assert store.effective_mode() is WriteMode.CONFIG
    assert store.effective_mode(WriteMode.ENV) is WriteMode.ENV


@pytest.mark.parametrize("alias", ["", "   ", "cc", "a b", "tab\there", "new\nline"])
def test_invalid_aliases_rejected(alias):
    with pytest.raises(AliasError):
        validate_alias(alias)


def test_alias_error_messages():
    with pytest.raises(AliasError, match="cannot be empty"):
        validate_alias("")
    with pytest.raises(AliasError, match="reserved"):
        validate_alias("cc")
    with pytest.raises(AliasError, match="whitespace"):
        validate_alias("my alias")
    assert validate_alias("CC") == "CC"


def test_parse_u32_bounds():
    assert parse_u32("0") == 0
    assert parse_u32(" 4294967295 ") == 4294967295
    for bad in ("-1", "4294967296", "1.5", "abc", ""):
        with pytest.raises(ValueError):
            parse_u32(bad)


def test_write_mode_parse():
    assert WriteMode.parse("ENV") is WriteMode.ENV
    assert WriteMode.parse("config") is WriteMode.CONFIG
    with pytest.raises(ValueError):
        WriteMode.parse("file")
