"""
Unit tests for the development-only source-line lookup.
"""

import pytest

from api_error_monitor.analyzers.source_lookup import (
    SourceLineLookup,
    SourceLocation,
    find_locations,
    has_locator,
)
from api_error_monitor.errors import SourceLookupError


@pytest.fixture
def workspace(tmp_path):
    """Workspace holding a Dart package and a Python project."""
    dart_models = tmp_path / "shop_app" / "lib" / "models"
    dart_models.mkdir(parents=True)
    (dart_models / "order.dart").write_text(
        "class Order {\n"
        "  Order.fromJson(Map<String, dynamic> json)\n"
        "      : total = json['total'] as double;\n"
        "}\n"
    )

    python_pkg = tmp_path / "backend" / "src" / "orders"
    python_pkg.mkdir(parents=True)
    (python_pkg / "models.py").write_text(
        "def from_dict(data):\n"
        "    return Order(total=data['total'])\n"
    )
    return tmp_path


class TestLocators:
    """Test locator detection."""

    def test_dart_locator(self):
        text = "#0      new Order.fromJson (package:shop_app/models/order.dart:3:22)"

        assert has_locator(text)
        assert list(find_locations(text)) == [
            SourceLocation(path="package:shop_app/models/order.dart", line_number=3)
        ]

    def test_python_locator(self):
        text = '  File "/srv/backend/src/orders/models.py", line 2, in from_dict'

        assert has_locator(text)
        assert list(find_locations(text)) == [
            SourceLocation(path="/srv/backend/src/orders/models.py", line_number=2)
        ]

    def test_plain_text_has_no_locator(self):
        assert not has_locator("type 'String' is not a subtype of type 'int'")
        assert list(find_locations("no frames here")) == []


class TestSourceLineLookup:
    """Test resolving and reading source lines."""

    def test_package_path_under_nested_root(self, workspace):
        lookup = SourceLineLookup([str(workspace)])

        line = lookup.lookup("#0 Order.fromJson (package:shop_app/models/order.dart:3:22)")

        assert line == "      : total = json['total'] as double;"

    def test_absolute_python_path_inside_root(self, workspace):
        path = workspace / "backend" / "src" / "orders" / "models.py"
        lookup = SourceLineLookup([str(workspace)])

        line = lookup.lookup(f'  File "{path}", line 2, in from_dict')

        assert line == "    return Order(total=data['total'])"

    def test_absolute_path_outside_roots_rejected(self, workspace, tmp_path_factory):
        elsewhere = tmp_path_factory.mktemp("elsewhere") / "secret.py"
        elsewhere.write_text("token = data['token']\n")
        lookup = SourceLineLookup([str(workspace / "backend")])

        with pytest.raises(SourceLookupError):
            lookup.resolve(str(elsewhere))

    def test_relative_path_cannot_leave_root(self, workspace):
        (workspace / "secret.py").write_text("token = data['token']\n")
        lookup = SourceLineLookup([str(workspace / "backend")])

        with pytest.raises(SourceLookupError):
            lookup.resolve("../secret.py")
        assert lookup.lookup('  File "../secret.py", line 1, in <module>') is None

    def test_extract_tries_each_frame(self, workspace):
        path = workspace / "backend" / "src" / "orders" / "models.py"
        text = (
            f'  File "{path}", line 1, in <module>\n'
            f'  File "{path}", line 2, in from_dict\n'
        )
        lookup = SourceLineLookup([str(workspace)])

        assert lookup.lookup(text) == "def from_dict(data):"
        assert lookup.lookup(text, lambda line: "total" if "total" in line else None) == "total"
        assert lookup.lookup(text, lambda line: None) is None

    def test_line_beyond_file_end(self, workspace):
        lookup = SourceLineLookup([str(workspace)])

        assert lookup.lookup("(package:shop_app/models/order.dart:99:1)") is None

    def test_read_line_errors(self, workspace):
        with pytest.raises(SourceLookupError):
            SourceLineLookup.read_line(workspace / "missing.dart", 1)

    def test_no_roots(self):
        assert SourceLineLookup([]).lookup("(package:a/b.dart:1:1)") is None

    def test_missing_root_ignored(self, workspace):
        lookup = SourceLineLookup([str(workspace / "nope"), str(workspace)])

        assert lookup.lookup("(package:shop_app/models/order.dart:3:22)") is not None
