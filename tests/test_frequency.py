"""Tests for trait frequency aggregation."""

from rarityforge.rarity.frequency import build_trait_table


class TestBuildTraitTable:
    def test_non_mapping_entry_counts_as_untyped_trait(self) -> None:
        """A null entry in an attribute list is an untyped trait with no value."""
        table = build_trait_table(
            [
                [None],
                [],
                [{"trait_type": "Hat", "value": "Cap"}],
            ]
        )

        assert table == {
            "—": {"None": 3},
            "Hat": {"Cap": 1, "None": 2},
        }

    def test_scenario_a_counts_missing_as_none(self) -> None:
        """An item without Background lands in the None bucket."""
        table = build_trait_table(
            [
                [{"trait_type": "Background", "value": "Red"}],
                [{"trait_type": "Background", "value": "Blue"}],
                [],
            ]
        )

        assert table == {"Background": {"Red": 1, "Blue": 1, "None": 1}}

    def test_no_none_bucket_when_all_present(self) -> None:
        table = build_trait_table(
            [
                [{"trait_type": "Hat", "value": "Cap"}],
                [{"trait_type": "Hat", "value": "Crown"}],
            ]
        )

        assert "None" not in table["Hat"]

    def test_explicit_none_merges_with_missing(self) -> None:
        """A null value and an absent trait share the None bucket."""
        table = build_trait_table(
            [
                [{"trait_type": "Hat", "value": None}],
                [],
                [{"trait_type": "Hat", "value": "Cap"}],
            ]
        )

        assert table["Hat"] == {"None": 2, "Cap": 1}

    def test_counts_sum_to_total(self) -> None:
        """Every trait type's counts sum to the collection size."""
        attributes = [
            [{"trait_type": "Hat", "value": "Cap"}, {"trait_type": "Eyes", "value": "Laser"}],
            [{"trait_type": "Hat", "value": "Crown"}],
            [{"trait_type": "Mouth", "value": "Smile"}],
            [],
            None,
        ]
        table = build_trait_table(attributes)

        assert {sum(counts.values()) for counts in table.values()} == {len(attributes)}

    def test_duplicate_trait_type_counted_once_for_presence(self) -> None:
        """Repeated values still count, but presence is per item."""
        table = build_trait_table(
            [
                [{"trait_type": "Hat", "value": "Cap"}, {"trait_type": "Hat", "value": "Cap"}],
                [],
            ]
        )

        assert table["Hat"] == {"Cap": 2, "None": 1}

    def test_empty_collection(self) -> None:
        assert build_trait_table([]) == {}

    def test_normalizes_before_counting(self) -> None:
        """Whitespace variants are counted together."""
        table = build_trait_table(
            [
                [{"trait_type": " Hat", "value": "Cap "}],
                [{"trait_type": "Hat", "value": "Cap"}],
            ]
        )

        assert table == {"Hat": {"Cap": 2}}
