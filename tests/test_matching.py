"""Tests for grouping and greedy pair matching."""

from datetime import datetime
from decimal import Decimal

import pytest

from app.errors import MalformedRecordError
from app.models.transaction import UnmatchedReason
from app.services.matching import (
    GreedyPairMatcher,
    GroupingKeyDeriver,
    RecordGrouper,
    TextNormalizer,
    amounts_equal,
)


@pytest.fixture
def grouper():
    """Grouper with default key derivation."""
    return RecordGrouper(GroupingKeyDeriver(TextNormalizer(), date_window_seconds=300))


@pytest.fixture
def matcher():
    """Matcher with default normalization and identity checks."""
    return GreedyPairMatcher(TextNormalizer())


class TestRecordGrouper:
    """Tests for RecordGrouper."""

    def test_empty_input(self, grouper):
        """Test that no records give an empty mapping."""
        assert grouper.group([]) == {}

    def test_groups_preserve_input_order(self, grouper, make_record):
        """Test that each list keeps the order records were seen in."""
        first = make_record(transaction_id="A", transaction_narrative="first")
        other = make_record(transaction_id="B")
        second = make_record(transaction_id="A", transaction_narrative="second")

        grouped = grouper.group([first, other, second])

        assert list(grouped) == ["ID:A", "ID:B"]
        assert grouped["ID:A"] == [first, second]
        assert grouped["ID:B"] == [other]

    def test_no_deduplication(self, grouper, make_record):
        """Test that duplicate records are all kept."""
        record = make_record()

        grouped = grouper.group([record, record, record])

        assert grouped == {"ID:TXN001": [record, record, record]}

    def test_accepts_any_iterable(self, grouper, make_record):
        """Test grouping from a generator."""
        grouped = grouper.group(make_record(transaction_id=str(i)) for i in range(3))

        assert len(grouped) == 3

    def test_fresh_mapping_per_call(self, grouper, make_record):
        """Test that two calls never share a mapping."""
        records = [make_record()]

        assert grouper.group(records) is not grouper.group(records)

    def test_malformed_record_propagates(self, grouper, make_record):
        """Test that a record that cannot be keyed aborts grouping."""
        records = [make_record(), make_record(transaction_id=None, transaction_amount=1.5)]

        with pytest.raises(MalformedRecordError):
            grouper.group(records)


class TestAmountsEqual:
    """Tests for amounts_equal."""

    def test_scale_invariant(self):
        assert amounts_equal(Decimal("100.50"), Decimal("100.5"))

    def test_different(self):
        assert not amounts_equal(Decimal("100.50"), Decimal("200.75"))

    def test_none_handling(self):
        assert amounts_equal(None, None)
        assert not amounts_equal(Decimal("1"), None)
        assert not amounts_equal(None, Decimal("1"))


class TestGreedyPairMatcher:
    """Tests for GreedyPairMatcher."""

    def test_identical_pair(self, matcher, make_record):
        """Test that identical records are counted, not reported."""
        result = matcher.match([make_record()], [make_record()])

        assert result.identical_count == 1
        assert result.unmatched == []

    def test_identical_with_different_amount_scale(self, matcher, make_record):
        """Test that 100.50 and 100.5 are identical amounts."""
        result = matcher.match(
            [make_record(transaction_amount=Decimal("100.50"))],
            [make_record(transaction_amount=Decimal("100.5"))],
        )

        assert result.identical_count == 1

    def test_details_mismatch_on_narrative(self, matcher, make_record):
        """Test same amount with a different narrative."""
        result = matcher.match(
            [make_record()],
            [make_record(transaction_narrative="Different payment description")],
        )

        assert result.identical_count == 0
        assert len(result.unmatched) == 1
        assert result.unmatched[0].reason == UnmatchedReason.DETAILS_MISMATCH

    def test_details_mismatch_on_wallet(self, matcher, make_record):
        """Test same amount with a different wallet reference."""
        result = matcher.match([make_record()], [make_record(wallet_reference="W2")])

        assert result.unmatched[0].reason == UnmatchedReason.DETAILS_MISMATCH

    def test_not_identical_on_amount(self, matcher, make_record):
        """Test that a different amount is a material difference."""
        result = matcher.match([make_record()], [make_record(transaction_amount=Decimal("200.75"))])

        assert result.unmatched[0].reason == UnmatchedReason.NOT_IDENTICAL

    def test_not_identical_when_only_case_differs(self, matcher, make_record):
        """Test that narratives equal after normalization are not a details mismatch."""
        result = matcher.match(
            [make_record()],
            [make_record(transaction_narrative="PAYMENT  for services")],
        )

        assert result.identical_count == 0
        assert result.unmatched[0].reason == UnmatchedReason.NOT_IDENTICAL

    def test_not_identical_on_date(self, matcher, make_record):
        """Test that date differences are material."""
        result = matcher.match(
            [make_record()],
            [make_record(transaction_date=datetime(2014, 1, 11, 22, 27, 45))],
        )

        assert result.unmatched[0].reason == UnmatchedReason.NOT_IDENTICAL

    def test_pair_carries_both_records(self, matcher, make_record):
        """Test that a mismatch keeps both sides and the representative ID."""
        left = make_record()
        right = make_record(wallet_reference="W2")

        outcome = matcher.match([left], [right]).unmatched[0]

        assert outcome.transaction_id == "TXN001"
        assert outcome.file1 is left
        assert outcome.file2 is right

    def test_representative_id_falls_back_to_right(self, matcher, make_record):
        """Test that a blank left ID defers to the right-side ID."""
        left = make_record(transaction_id=" ")
        right = make_record(transaction_id="R1", transaction_amount=Decimal("5"))

        outcome = matcher.match([left], [right]).unmatched[0]

        assert outcome.transaction_id == "R1"

    def test_missing_left_only(self, matcher, make_record):
        """Test that unpaired left records are missing in file2."""
        record = make_record()

        result = matcher.match([record], [])

        assert result.identical_count == 0
        assert len(result.unmatched) == 1
        outcome = result.unmatched[0]
        assert outcome.reason == UnmatchedReason.MISSING_IN_OTHER_FILE
        assert outcome.file1 is record
        assert outcome.file2 is None

    def test_missing_right_only(self, matcher, make_record):
        """Test that unpaired right records are missing in file1."""
        result = matcher.match([], [make_record(), make_record()])

        assert [o.file1 for o in result.unmatched] == [None, None]
        assert all(o.reason == UnmatchedReason.MISSING_IN_OTHER_FILE for o in result.unmatched)

    def test_lifo_pairing(self, matcher, make_record):
        """Test that the last record of each list pairs first."""
        early = make_record(transaction_narrative="early")
        late = make_record(transaction_narrative="late")
        counterpart = make_record(transaction_narrative="late")

        result = matcher.match([early, late], [counterpart])

        assert result.identical_count == 1
        assert len(result.unmatched) == 1
        assert result.unmatched[0].file1 is early
        assert result.unmatched[0].reason == UnmatchedReason.MISSING_IN_OTHER_FILE

    def test_lifo_has_no_closest_match_search(self, matcher, make_record):
        """Test that position, not similarity, decides the pairing."""
        same = make_record(transaction_narrative="same")
        other = make_record(transaction_narrative="other")

        result = matcher.match([same, other], [same])

        assert result.identical_count == 0
        reasons = [o.reason for o in result.unmatched]
        assert reasons == [UnmatchedReason.DETAILS_MISMATCH, UnmatchedReason.MISSING_IN_OTHER_FILE]
        assert result.unmatched[1].file1 is same

    def test_leftovers_keep_list_order(self, matcher, make_record):
        """Test that leftovers are reported in their list order."""
        records = [make_record(transaction_narrative=str(i)) for i in range(4)]

        result = matcher.match(records, [make_record(transaction_narrative="3")])

        assert [o.file1 for o in result.unmatched] == records[:3]

    def test_inputs_not_modified(self, matcher, make_record):
        """Test that the input lists are left intact."""
        left = [make_record(), make_record()]
        right = [make_record()]

        matcher.match(left, right)

        assert len(left) == 2
        assert len(right) == 1

    def test_wallet_ignored_when_disabled(self, make_record):
        """Test that wallet references do not count when comparison is off."""
        matcher = GreedyPairMatcher(TextNormalizer(), compare_wallet_reference=False)

        result = matcher.match([make_record()], [make_record(wallet_reference="W2")])

        assert result.identical_count == 1

    def test_type_ignored_when_disabled(self, make_record):
        """Test that transaction types do not count when consideration is off."""
        matcher = GreedyPairMatcher(TextNormalizer(), consider_transaction_type=False)

        result = matcher.match([make_record()], [make_record(transaction_type=2)])

        assert result.identical_count == 1

    def test_type_difference_is_material(self, matcher, make_record):
        """Test that a different type is not identical by default."""
        result = matcher.match([make_record()], [make_record(transaction_type=2)])

        assert result.unmatched[0].reason == UnmatchedReason.NOT_IDENTICAL
