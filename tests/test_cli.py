# Copyright (c) Syntropy Systems
"""Tests for parkgallery CLI commands."""

import json
import zipfile

from conftest import make_layout, make_result
from typer.testing import CliRunner

from parkgallery.cli.main import app

runner = CliRunner()


def _batch():
    other = make_layout(trees=[(1, 3.0, 3.0), (2, 6.0, 6.0)])
    return {
        "a.json": make_result("1,2", hint_mode="clusters"),
        "b.json": make_result("2,1", hint_mode="clusters"),
        "c.json": make_result("7"),
        "d.json": make_result("1", layout=other, tag="run-b"),
    }


class TestInitCommand:
    """Tests for parkgallery init command."""

    def test_init_creates_directory(self, temp_dir):
        """Test that init creates .parkgallery/config.yaml."""
        result = runner.invoke(app, ["init", str(temp_dir)])

        assert result.exit_code == 0
        assert (temp_dir / ".parkgallery" / "config.yaml").exists()
        assert "threshold: 0.5" in (temp_dir / ".parkgallery" / "config.yaml").read_text()

    def test_init_already_initialized(self, gallery_project):
        """Test init when already initialized."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Already initialized" in result.stdout


class TestGroupsCommand:
    """Tests for parkgallery groups command."""

    def test_groups_table(self, gallery_project, write_results):
        """Test groups are listed with tags."""
        paths = write_results(_batch())

        result = runner.invoke(app, ["groups", str(paths[0].parent)])

        assert result.exit_code == 0
        assert "Group 1" in result.stdout
        assert "Group 2" in result.stdout
        assert "M.A" in result.stdout
        assert "COMPOSITE" in result.stdout

    def test_groups_json(self, gallery_project, write_results):
        """Test --json prints the manifest."""
        paths = write_results(_batch())

        result = runner.invoke(app, ["groups", "--json", *[str(p) for p in paths]])

        assert result.exit_code == 0
        manifest = json.loads(result.stdout)
        assert len(manifest["groups"]) == 2
        assert manifest["groups"][0]["members"][0]["tags"] == ["M.A", "MH.A"]
        assert manifest["duplicates"]["modelGroups"]["gpt-4o"]["[1,2]"] == [
            "a.json",
            "b.json",
        ]

    def test_groups_no_composite(self, gallery_project, write_results):
        """Test --no-composite hides composite rows."""
        paths = write_results(_batch())

        result = runner.invoke(app, ["groups", "--no-composite", str(paths[0])])

        assert result.exit_code == 0
        assert "COMPOSITE" not in result.stdout

    def test_groups_reports_bad_file(self, gallery_project, write_results):
        """Test a malformed file is reported and the rest still group."""
        paths = write_results({"good.json": make_result("1")})
        (paths[0].parent / "bad.json").write_text("{not json")

        result = runner.invoke(app, ["groups", str(paths[0].parent)])

        assert result.exit_code == 0
        assert "Could not process bad.json" in result.stdout
        assert "Group 1" in result.stdout

    def test_groups_no_json_files(self, gallery_project):
        """Test an error when nothing selectable is given."""
        (gallery_project / "notes.txt").write_text("hello")

        result = runner.invoke(app, ["groups", str(gallery_project / "notes.txt")])

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestRenderCommand:
    """Tests for parkgallery render command."""

    def test_render_directory(self, gallery_project, write_results):
        """Test --no-zip writes loose PNGs and metadata.json."""
        paths = write_results(_batch())
        out = gallery_project / "out"

        result = runner.invoke(
            app,
            ["render", str(paths[0].parent), "--no-zip", "-o", str(out), "-s", "64"],
        )

        assert result.exit_code == 0
        assert "Rendered 9 image(s) from 2 group(s)" in result.stdout
        manifest = json.loads((out / "metadata.json").read_text())
        assert len(manifest["images"]) == 9
        for image in manifest["images"]:
            assert (out / image["filename"]).exists()

    def test_render_zip(self, gallery_project, write_results):
        """Test the default zip output."""
        paths = write_results(_batch())
        out = gallery_project / "out"

        result = runner.invoke(
            app, ["render", *[str(p) for p in paths], "-o", str(out), "-s", "64"]
        )

        assert result.exit_code == 0
        archives = list(out.glob("*_park_images.zip"))
        assert len(archives) == 1
        with zipfile.ZipFile(archives[0]) as zf:
            assert "metadata.json" in zf.namelist()

    def test_render_nothing_valid(self, gallery_project, write_results):
        """Test rendering fails when every file is broken."""
        paths = write_results({"x.json": {"scenario": {"trees": "nope"}}})

        result = runner.invoke(app, ["render", str(paths[0]), "-o", str(gallery_project)])

        assert result.exit_code == 1
        assert "No valid result files" in result.stdout
