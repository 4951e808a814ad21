"""
Unit tests for candidate-key scanning.
"""

import pytest

from api_error_monitor.analyzers.key_scanner import (
    PRIMITIVE_TYPE_NAMES,
    build_exclusions,
    is_valid_candidate,
    scan_assignment,
    scan_line,
    scan_lines,
)
from api_error_monitor.models.error_info import TypePair


@pytest.fixture
def exclusions():
    """Default exclusion set with no discovered types."""
    return build_exclusions()


class TestScanLine:
    """Test the pattern families on single lines."""

    def test_assignment_with_colon(self, exclusions):
        assert scan_line("      price: json['price'],", exclusions) == "price"

    def test_assignment_prefers_subscript_key(self, exclusions):
        """Test that the quoted key wins over the left-hand identifier."""
        assert scan_line("productName: json['name'],", exclusions) == "name"

    def test_assignment_falls_back_to_identifier(self, exclusions):
        """Test that the identifier is used when the key is excluded."""
        assert scan_line("price: json['int'],", exclusions) == "price"

    def test_double_quotes(self, exclusions):
        assert scan_line('title = data["title"];', exclusions) == "title"

    def test_bare_subscript(self, exclusions):
        assert scan_line("  at json['id'] lookup", exclusions) == "id"

    def test_declaration(self, exclusions):
        assert scan_line("final createdAt = map['created_at'];", exclusions) == "created_at"

    def test_container_is_case_insensitive(self, exclusions):
        assert scan_line("JSON['email']", exclusions) == "email"

    def test_response_container(self, exclusions):
        assert scan_line("response['items']", exclusions) == "items"

    def test_multiple_subscripts_left_to_right(self, exclusions):
        """Test that the first valid subscript on a line wins."""
        line = "json['String'] ?? json['rating'] ?? json['score']"
        assert scan_line(line, exclusions) == "rating"

    def test_type_name_rejected(self, exclusions):
        assert scan_line("json['String']", exclusions) is None

    def test_single_character_rejected(self, exclusions):
        assert scan_line("json['x']", exclusions) is None

    @pytest.mark.parametrize("token", ["subtype", "prototype", "broadcast", "type"])
    def test_phrase_fragments_rejected(self, exclusions, token):
        assert scan_line(f"json['{token}']", exclusions) is None

    def test_unknown_container_ignored(self, exclusions):
        """Test that only the known container vocabulary is scanned."""
        assert scan_line("amount: payload['amount']", exclusions) is None

    def test_empty_line(self, exclusions):
        assert scan_line("", exclusions) is None


class TestScanLines:
    """Test family-major scanning across lines."""

    def test_assignment_beats_earlier_bare_subscript(self, exclusions):
        lines = [
            "json['id'] was read first",
            "      price: json['price'],",
        ]
        assert scan_lines(lines, exclusions) == "price"

    def test_falls_back_to_bare_subscript(self, exclusions):
        lines = ["#0 main", "data['quantity']"]
        assert scan_lines(lines, exclusions) == "quantity"

    def test_no_candidates(self, exclusions):
        assert scan_lines(["#0 main", "#1 run"], exclusions) is None


class TestScanAssignment:
    """Test the container-agnostic assignment scan."""

    def test_unknown_container(self, exclusions):
        assert scan_assignment("amount: payload['amount']", exclusions) == "amount"

    def test_dotted_container(self, exclusions):
        assert scan_assignment("total = self.body['total']", exclusions) == "total"

    def test_prefers_key_over_identifier(self, exclusions):
        assert scan_assignment("userId: body['user_id']", exclusions) == "user_id"

    def test_identifier_when_key_excluded(self, exclusions):
        assert scan_assignment("count: body['int']", exclusions) == "count"


class TestCandidateValidation:
    """Test candidate filtering."""

    def test_invalid_candidates(self, exclusions):
        assert not is_valid_candidate(None, exclusions)
        assert not is_valid_candidate("", exclusions)
        assert not is_valid_candidate("a", exclusions)
        assert not is_valid_candidate("String", exclusions)
        assert not is_valid_candidate("castValue", exclusions)

    def test_valid_candidate(self, exclusions):
        assert is_valid_candidate("id", exclusions)
        assert is_valid_candidate("contentType", exclusions)

    def test_discovered_types_are_excluded(self):
        exclusions = build_exclusions(TypePair(received_type="_Map", expected_type="Product"))

        assert "_Map" in exclusions
        assert "Product" in exclusions
        assert PRIMITIVE_TYPE_NAMES <= exclusions
        assert not is_valid_candidate("Product", exclusions)

    def test_exclusion_sets_are_independent(self):
        """Test that each build returns a fresh set."""
        first = build_exclusions(TypePair(received_type="Order"))
        second = build_exclusions()

        assert "Order" in first
        assert "Order" not in second
