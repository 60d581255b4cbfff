"""Tests for tapdocs.extractor."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from tapdocs.extractor import MetadataExtractor, to_kebab_case, version_from_url
from tests._fixtures.tap_builder import SAMPLE_CHECKSUM


@pytest.mark.parametrize(
    ("identifier", "expected"),
    [
        ("ExampleTool", "example-tool"),
        ("ExampleToolTwo", "example-tool-two"),
        ("ExampleTool2", "example-tool2"),
        ("Jq", "jq"),
        ("Tool2Go", "tool2-go"),
    ],
)
def test_to_kebab_case(identifier: str, expected: str) -> None:
    assert to_kebab_case(identifier) == expected


def test_version_from_url_reads_archive_tag() -> None:
    assert version_from_url("https://example.com/foo/archive/v2.3.1.tar.gz") == "2.3.1"
    assert version_from_url("https://github.com/x/example-tool2/refs/tags/v2.0.0.tar.gz") == "2.0.0"
    assert version_from_url("https://example.com/foo/latest.tar.gz") is None
    assert version_from_url(None) is None


def test_parse_file_extracts_every_field(tap_builder, fixed_clock) -> None:
    path = tap_builder.add_formula(
        "e/example-tool.rb",
        "ExampleTool",
        desc="Imaginary tool",
        extra='depends_on "go" => :build\ndepends_on "openssl@3"\ndepends_on "go"',
    )
    extractor = MetadataExtractor(tap_builder.config(), clock=fixed_clock)

    record = extractor.parse_file(path)

    assert record is not None
    assert record.name == "example-tool"
    assert record.declared_type_name == "ExampleTool"
    assert record.description == "Imaginary tool"
    assert record.homepage_url == "https://github.com/example/exampletool"
    assert record.source_url == "https://github.com/example/exampletool/archive/v1.0.0.tar.gz"
    assert record.version == "1.0.0"
    assert record.checksum == SAMPLE_CHECKSUM
    assert record.license == "MIT"
    assert record.dependencies == ["go", "openssl@3"]
    assert record.relative_file_path == "e/example-tool.rb"
    stamp = datetime.fromisoformat(record.last_modified_timestamp)
    assert stamp.tzinfo is not None


def test_explicit_version_wins_over_url(tap_builder) -> None:
    path = tap_builder.add_formula("p/pinned.rb", "Pinned", extra='version "9.9"')
    record = MetadataExtractor(tap_builder.config()).parse_file(path)

    assert record is not None
    assert record.version == "9.9"


def test_checksum_must_be_64_hex_digits(tap_builder) -> None:
    tap_builder.write(
        {
            "Formula/s/short-sum.rb": """
            class ShortSum < Formula
              url "https://example.com/short-sum.tar.gz"
              sha256 "abc123"
            end
            """
        }
    )
    record = MetadataExtractor(tap_builder.config()).parse_file(
        tap_builder.root / "Formula" / "s" / "short-sum.rb"
    )

    assert record is not None
    assert record.checksum is None
    assert record.version is None
    assert record.description is None
    assert record.dependencies == []


def test_checksum_is_lowercased(tap_builder) -> None:
    upper = SAMPLE_CHECKSUM.upper()
    tap_builder.write(
        {
            "Formula/u/upper.rb": f"""
            class Upper < Formula
              sha256 "{upper}"
            end
            """
        }
    )
    record = MetadataExtractor(tap_builder.config()).parse_file(
        tap_builder.root / "Formula" / "u" / "upper.rb"
    )

    assert record is not None
    assert record.checksum == SAMPLE_CHECKSUM


def test_file_without_type_declaration_is_skipped(tap_builder, fixed_clock) -> None:
    tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    tap_builder.write({"Formula/n/not-a-formula.rb": 'desc "orphan"\nurl "https://x/v1.0.tar.gz"\n'})

    record_set = MetadataExtractor(tap_builder.config(), clock=fixed_clock).extract()

    assert record_set.count == 1
    assert [record.name for record in record_set.records] == ["example-tool"]


def test_unreadable_file_does_not_abort_run(tap_builder) -> None:
    tap_builder.add_formula("g/good.rb", "Good")
    broken = tap_builder.root / "Formula" / "b" / "broken.rb"
    broken.parent.mkdir(parents=True)
    broken.write_bytes(b"\xff\xfeclass Broken < Formula\n\x80\x81")

    record_set = MetadataExtractor(tap_builder.config()).extract()

    assert [record.name for record in record_set.records] == ["good"]


def test_records_sorted_by_name_and_other_extensions_ignored(tap_builder) -> None:
    tap_builder.add_formula("z/zeta.rb", "Zeta")
    tap_builder.add_formula("a/alpha-tool.rb", "AlphaTool")
    tap_builder.add_formula("m/mid.rb", "Mid")
    tap_builder.write({"Formula/README.md": "class Ignored < Formula\n"})

    record_set = MetadataExtractor(tap_builder.config()).extract()

    assert [record.name for record in record_set.records] == ["alpha-tool", "mid", "zeta"]


def test_duplicate_names_resolve_to_last_sorted_path(tap_builder) -> None:
    tap_builder.add_formula("a/dup.rb", "Dup", desc="first")
    tap_builder.add_formula("b/dup.rb", "Dup", desc="second")

    record_set = MetadataExtractor(tap_builder.config()).extract()

    assert record_set.count == 1
    assert record_set.records[0].description == "second"
    assert record_set.records[0].relative_file_path == "b/dup.rb"


def test_missing_source_directory_yields_empty_set(tap_builder, fixed_clock) -> None:
    record_set = MetadataExtractor(tap_builder.config(), clock=fixed_clock).extract()

    assert record_set.count == 0
    assert record_set.generated_at == "2026-10-18T12:00:00+00:00"


def test_run_writes_pretty_printed_document(tap_builder, fixed_clock) -> None:
    tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    config = tap_builder.config(source_name="example/tap")

    MetadataExtractor(config, clock=fixed_clock).run()

    text = config.data_file.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    document = json.loads(text)
    assert document["sourceName"] == "example/tap"
    assert document["generatedAt"] == "2026-10-18T12:00:00+00:00"
    assert document["count"] == 1
    assert document["records"][0]["name"] == "example-tool"
    assert document["records"][0]["declaredTypeName"] == "ExampleTool"
    assert set(document["records"][0]) == {
        "name",
        "declaredTypeName",
        "description",
        "homepageUrl",
        "sourceUrl",
        "version",
        "checksum",
        "license",
        "dependencies",
        "relativeFilePath",
        "lastModifiedTimestamp",
    }
