"""End-to-end tests for the build pipeline."""

from __future__ import annotations

import json
import os

import pytest

from tapdocs.orchestrator import BuildError, BuildOrchestrator, rebuild_from_disk


def _snapshot(root) -> dict:
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


def test_build_skips_files_without_type_declaration(tap_builder, fixed_clock) -> None:
    tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    tap_builder.write({"Formula/n/notes.rb": "# nothing to see\n"})
    config = tap_builder.config()

    outcome = BuildOrchestrator(config, clock=fixed_clock).run_build()

    assert outcome.record_set.count == 1
    assert outcome.page_count == 3
    output = config.output_dir
    assert (output / "index.html").is_file()
    assert (output / "packages.html").is_file()
    assert [path.name for path in (output / "packages").iterdir()] == ["example-tool.html"]
    document = json.loads(config.data_file.read_text(encoding="utf-8"))
    assert document["count"] == 1


def test_build_is_idempotent_with_fixed_clock(tap_builder, fixed_clock) -> None:
    path = tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    os.utime(path, (1_700_000_000, 1_700_000_000))
    config = tap_builder.config()
    orchestrator = BuildOrchestrator(config, clock=fixed_clock)

    orchestrator.run_build()
    first = _snapshot(config.output_dir)
    orchestrator.run_build()
    second = _snapshot(config.output_dir)

    assert first == second
    assert "packages/example-tool.html" in first


def test_missing_templates_fail_before_anything_is_written(tap_builder, fixed_clock) -> None:
    tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    tap_builder.write({"theme/index.html.j2": "index\n"})
    config = tap_builder.config()

    with pytest.raises(BuildError, match="package.html.j2"):
        BuildOrchestrator(config, clock=fixed_clock).run_build()

    assert not config.data_file.exists()
    assert not config.output_dir.exists()


def test_render_without_data_builds_empty_site(tap_builder, fixed_clock) -> None:
    config = tap_builder.config(source_name="example/tap")

    result = BuildOrchestrator(config, clock=fixed_clock).run_render()

    assert result.page_count == 2
    listing = (config.output_dir / "packages.html").read_text(encoding="utf-8")
    assert "No packages found." in listing
    assert not config.data_file.exists()


def test_render_rejects_corrupt_record_data(tap_builder, fixed_clock) -> None:
    config = tap_builder.config()
    config.data_file.parent.mkdir(parents=True)
    config.data_file.write_text("[]", encoding="utf-8")

    with pytest.raises(BuildError):
        BuildOrchestrator(config, clock=fixed_clock).run_render()


def test_parse_then_render_matches_build(tap_builder, fixed_clock) -> None:
    tap_builder.add_formula("a/alpha.rb", "Alpha")
    tap_builder.add_formula("b/beta.rb", "Beta")
    config = tap_builder.config()
    orchestrator = BuildOrchestrator(config, clock=fixed_clock)

    record_set = orchestrator.run_parse()
    result = orchestrator.run_render()

    assert [record.name for record in record_set.records] == ["alpha", "beta"]
    assert result.page_count == 4


def test_clean_removes_generated_files_only(tap_builder, fixed_clock) -> None:
    tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    tap_builder.write({"docs/CNAME": "example.com\n"})
    config = tap_builder.config()
    orchestrator = BuildOrchestrator(config, clock=fixed_clock)
    orchestrator.run_build()

    removed = orchestrator.clean()

    assert config.output_dir / "index.html" in removed
    assert config.data_file in removed
    assert sorted(path.name for path in config.output_dir.iterdir()) == ["CNAME", "_data"]
    assert orchestrator.clean() == []


def test_check_reports_missing_source_directory(tap_builder) -> None:
    items = {item.label: item for item in BuildOrchestrator(tap_builder.config()).check()}

    assert not items["Source directory"].present
    assert items["Source directory"].required
    assert items["Index template"].present
    assert items["Theme style.css"].present
    assert not items["Theme style.css"].required


def test_rebuild_from_disk_picks_up_config_edits(tap_builder) -> None:
    tap_builder.add_formula("e/example-tool.rb", "ExampleTool")
    root = tap_builder.root
    rebuild_from_disk(root)
    assert (root / "docs" / "packages.html").is_file()

    tap_builder.write({".tapdocs.yml": 'listing_page: "all.html"\n'})
    outcome = rebuild_from_disk(root)

    assert (root / "docs" / "all.html").is_file()
    assert outcome.record_set.count == 1
