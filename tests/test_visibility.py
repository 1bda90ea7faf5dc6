import pytest

from purifier_card.logic.visibility import VisibilitySpec, is_visible, toggle, visible_keys

UNIVERSE = ["pm25", "iai", "humidity", "temperature"]


def _spec(persisted, universe=UNIVERSE):
    return VisibilitySpec.create(universe, persisted)


def test_empty_list_means_everything_visible():
    spec = _spec([])

    assert all(is_visible(spec, key) for key in UNIVERSE)
    assert visible_keys(spec) == UNIVERSE


def test_explicit_list_membership():
    spec = _spec(["humidity", "pm25"])

    assert is_visible(spec, "pm25")
    assert not is_visible(spec, "iai")
    assert visible_keys(spec) == ["pm25", "humidity"]


def test_hiding_from_all_visible_materializes_the_rest():
    spec = _spec([], universe=["pm25", "humidity"])

    assert toggle(spec, "pm25", False) == ["humidity"]


def test_showing_last_hidden_key_collapses_to_empty():
    spec = _spec(["pm25"], universe=["pm25", "humidity"])

    assert toggle(spec, "humidity", True) == []


def test_showing_while_all_visible_is_a_no_op():
    assert toggle(_spec([]), "pm25", True) == []


def test_showing_appends_without_duplicates():
    spec = _spec(["pm25"])

    assert toggle(spec, "iai", True) == ["pm25", "iai"]
    assert toggle(spec, "pm25", True) == ["pm25"]


def test_hiding_last_visible_key_yields_empty_list():
    # "none visible" shares the literal with "all visible"
    spec = _spec(["pm25"])

    assert toggle(spec, "pm25", False) == []


def test_unknown_keys_are_kept_as_literals():
    spec = _spec(["pm25"])

    assert toggle(spec, "co2", True) == ["pm25", "co2"]
    assert toggle(_spec(["pm25", "co2"]), "co2", False) == ["pm25"]
    assert toggle(_spec([]), "co2", False) == []


@pytest.mark.parametrize("turning_on", [True, False])
def test_toggle_result_reflects_requested_visibility(turning_on):
    for persisted in ([], ["pm25"], ["pm25", "humidity"], ["iai", "humidity", "temperature"]):
        for key in UNIVERSE:
            spec = _spec(persisted)
            result = toggle(spec, key, turning_on)
            after = _spec(result)

            assert len(result) == len(set(result))
            assert result != UNIVERSE
            if turning_on or result:
                assert is_visible(after, key) is turning_on


def test_sequence_of_hides_and_shows_returns_to_canonical_form():
    persisted: list[str] = []
    for key in ("pm25", "iai"):
        persisted = toggle(_spec(persisted), key, False)
    assert sorted(persisted) == ["humidity", "temperature"]

    for key in ("iai", "pm25"):
        persisted = toggle(_spec(persisted), key, True)
    assert persisted == []


def test_spec_deduplicates_inputs():
    spec = VisibilitySpec.create(["pm25", "pm25", "iai"], ["iai", "iai"])

    assert spec.universe == ("pm25", "iai")
    assert spec.persisted == ("iai",)
