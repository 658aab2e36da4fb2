"""Tests for the baseline manager."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lintbaseline.baseline import (
    BaselineConfig,
    BaselineManager,
    BaselineStats,
)
from lintbaseline.models.finding import BaselineFinding


class TestBaselineConfig:
    """Test BaselineConfig."""

    def test_defaults(self):
        """Should default to a single file in the working directory."""
        config = BaselineConfig()

        assert config.root == Path.cwd()
        assert config.baseline_file == Path(".lintbaseline.json")
        assert config.mode == "single"
        assert not config.split_by_rule

    def test_invalid_mode_rejected(self, tmp_path: Path):
        """Should refuse unknown storage modes."""
        with pytest.raises(ValueError, match="Invalid storage mode"):
            BaselineManager(BaselineConfig(root=tmp_path, mode="sharded"))


class TestPaths:
    """Test baseline location resolution."""

    def test_relative_baseline_file_joined_to_root(self, tmp_path: Path):
        """Should place a relative baseline file under the root."""
        manager = BaselineManager(BaselineConfig(root=tmp_path, baseline_file=Path("ci/baseline.json")))
        assert manager.baseline_path == tmp_path / "ci" / "baseline.json"
        assert manager.split_dir == tmp_path / "ci" / "baseline"

    def test_absolute_baseline_file_kept(self, tmp_path: Path):
        """Should use an absolute baseline file as given."""
        target = tmp_path / "elsewhere" / "known.json"
        manager = BaselineManager(BaselineConfig(root=tmp_path / "project", baseline_file=target))
        assert manager.baseline_path == target


@pytest.mark.parametrize("mode", ["single", "split"])
class TestRoundTrip:
    """Test save then load in both storage modes."""

    def test_save_and_load(self, tmp_path: Path, sample_document, mode):
        """Should read back what was saved, ordered by line then rule."""
        writer = BaselineManager(BaselineConfig(root=tmp_path, mode=mode))
        assert writer.save(sample_document)

        reader = BaselineManager(BaselineConfig(root=tmp_path, mode=mode))
        loaded = reader.load()

        assert set(loaded) == {"src/app.js", "src/lib/util.js"}
        assert [f.rule_id for f in loaded["src/app.js"]] == ["eqeqeq", "no-unused-vars"]
        assert loaded["src/lib/util.js"] == sample_document["src/lib/util.js"]

    def test_empty_guard(self, tmp_path: Path, mode):
        """Should refuse to write an empty document unless allowed."""
        manager = BaselineManager(BaselineConfig(root=tmp_path, mode=mode))

        assert manager.save({}) is False
        assert not manager.exists()

        assert manager.save({}, allow_empty=True) is True
        assert manager.exists()
        assert manager.load() == {}

    def test_delete(self, tmp_path: Path, sample_document, mode):
        """Should remove the stored baseline."""
        manager = BaselineManager(BaselineConfig(root=tmp_path, mode=mode))
        manager.save(sample_document)

        manager.delete()
        assert not manager.exists()


class TestStorageLocations:
    """Test where each mode writes."""

    def test_single_mode_file(self, single_baseline, sample_document, tmp_path: Path):
        """Should write .lintbaseline.json at the root."""
        single_baseline.save(sample_document)

        data = json.loads((tmp_path / ".lintbaseline.json").read_text(encoding="utf-8"))
        assert set(data) == {"src/app.js", "src/lib/util.js"}

    def test_split_mode_directory(self, split_baseline, sample_document, tmp_path: Path):
        """Should write rule documents into .lintbaseline/."""
        split_baseline.save(sample_document)

        directory = tmp_path / ".lintbaseline"
        assert sorted(p.name for p in directory.iterdir()) == [
            "_loader.json",
            "eqeqeq.json",
            "no-console.json",
            "no-unused-vars.json",
        ]
        assert not (tmp_path / ".lintbaseline.json").exists()


class TestLifecycle:
    """Test load/reset/save state handling."""

    def test_starts_unloaded(self, single_baseline):
        """Should hold no data before load."""
        assert not single_baseline.loaded
        assert single_baseline.data is None
        assert single_baseline.get_unmatched() == []

    def test_load_missing_baseline(self, single_baseline):
        """Should load an empty document when nothing is stored."""
        assert single_baseline.load() == {}
        assert single_baseline.loaded

    def test_load_is_idempotent(self, single_baseline, sample_document, tmp_path: Path):
        """Should not re-read storage on a second load."""
        single_baseline.save(sample_document)
        first = single_baseline.load()

        (tmp_path / ".lintbaseline.json").write_text("{}", encoding="utf-8")

        assert single_baseline.load() is first

    def test_reset_forces_reload(self, single_baseline, sample_document, tmp_path: Path):
        """Should read storage again after reset."""
        single_baseline.save(sample_document)
        single_baseline.load()

        (tmp_path / ".lintbaseline.json").write_text("{}", encoding="utf-8")
        single_baseline.reset()

        assert not single_baseline.loaded
        assert single_baseline.load() == {}

    def test_reset_restores_matches(self, single_baseline, sample_document):
        """Should make consumed matches available again after reset."""
        single_baseline.save(sample_document)
        args = ("src/lib/util.js", "no-console", 1, "Unexpected console statement.")

        assert single_baseline.is_in_baseline(*args)
        assert not single_baseline.is_in_baseline(*args)

        single_baseline.reset()
        assert single_baseline.is_in_baseline(*args)

    def test_save_does_not_touch_loaded_state(self, single_baseline, sample_document):
        """Should keep the loaded document after saving a new one."""
        single_baseline.load()
        single_baseline.save(sample_document)

        assert single_baseline.data == {}
        assert not single_baseline.is_in_baseline("src/lib/util.js", "no-console", 1, "Unexpected console statement.")


class TestMatching:
    """Test consuming lookups."""

    def test_is_in_baseline_loads_implicitly(self, single_baseline, sample_document):
        """Should load on first lookup."""
        single_baseline.save(sample_document)
        assert single_baseline.is_in_baseline("src/app.js", "eqeqeq", 3, "Expected '===' and instead saw '=='.")
        assert single_baseline.loaded

    def test_absolute_and_relative_paths(self, single_baseline, sample_document, tmp_path: Path):
        """Should accept absolute paths under the root and root-relative paths."""
        single_baseline.save(sample_document)

        assert single_baseline.is_in_baseline(
            str(tmp_path / "src" / "app.js"), "eqeqeq", 3, "Expected '===' and instead saw '=='."
        )
        assert single_baseline.is_in_baseline(
            "src/app.js", "no-unused-vars", 10, "'x' is defined but never used."
        )

    def test_mismatch_on_any_field(self, single_baseline, sample_document):
        """Should not match when rule, line, message or file differ."""
        single_baseline.save(sample_document)
        message = "Unexpected console statement."

        assert not single_baseline.is_in_baseline("src/lib/util.js", "no-alert", 1, message)
        assert not single_baseline.is_in_baseline("src/lib/util.js", "no-console", 2, message)
        assert not single_baseline.is_in_baseline("src/lib/util.js", "no-console", 1, "Other.")
        assert not single_baseline.is_in_baseline("src/app.js", "no-console", 1, message)

    def test_multiplicity(self, single_baseline):
        """Should match a finding recorded twice exactly twice."""
        finding = BaselineFinding("no-console", 5, 3, "Unexpected console statement.")
        single_baseline.save({"a.js": [finding, finding]})
        args = ("a.js", "no-console", 5, "Unexpected console statement.")

        assert single_baseline.is_in_baseline(*args)
        assert single_baseline.is_in_baseline(*args)
        assert not single_baseline.is_in_baseline(*args)

    def test_multiplicity_split_mode(self, split_baseline):
        """Should keep duplicate counts through split storage."""
        finding = BaselineFinding("no-console", 5, 3, "Unexpected console statement.")
        split_baseline.save({"a.js": [finding, finding]})
        args = ("a.js", "no-console", 5, "Unexpected console statement.")

        assert split_baseline.is_in_baseline(*args)
        assert split_baseline.is_in_baseline(*args)
        assert not split_baseline.is_in_baseline(*args)


class TestUnmatched:
    """Test leftover reporting."""

    def test_unmatched_after_partial_match(self, single_baseline, sample_document):
        """Should list entries no lookup consumed."""
        single_baseline.save(sample_document)
        single_baseline.is_in_baseline("src/app.js", "eqeqeq", 3, "Expected '===' and instead saw '=='.")
        single_baseline.is_in_baseline("src/lib/util.js", "no-console", 1, "Unexpected console statement.")

        unmatched = single_baseline.get_unmatched()

        assert len(unmatched) == 1
        entry = unmatched[0]
        assert entry.file == "src/app.js"
        assert entry.rule_id == "no-unused-vars"
        assert entry.line == 10
        assert entry.column == 5
        assert entry.unmatched_count == 1

    def test_unmatched_collapses_duplicates(self, single_baseline):
        """Should report one entry per fingerprint group with its remaining count."""
        finding = BaselineFinding("no-console", 5, 3, "Unexpected console statement.")
        single_baseline.save({"a.js": [finding, finding, finding]})
        single_baseline.is_in_baseline("a.js", "no-console", 5, "Unexpected console statement.")

        unmatched = single_baseline.get_unmatched()

        assert len(unmatched) == 1
        assert unmatched[0].unmatched_count == 2
        assert unmatched[0].to_dict() == {
            "file": "a.js",
            "ruleId": "no-console",
            "line": 5,
            "column": 3,
            "message": "Unexpected console statement.",
            "unmatchedCount": 2,
        }

    def test_all_matched(self, single_baseline, sample_document):
        """Should report nothing once every entry matched."""
        single_baseline.save(sample_document)
        for file_path, findings in sample_document.items():
            for f in findings:
                assert single_baseline.is_in_baseline(file_path, f.rule_id, f.line, f.message)

        assert single_baseline.get_unmatched() == []


class TestStats:
    """Test statistics."""

    def test_get_stats(self, single_baseline, sample_document):
        """Should count findings, files and rules."""
        single_baseline.save(sample_document)

        stats = single_baseline.get_stats()

        assert stats.total_errors == 3
        assert stats.file_count == 2
        assert stats.rule_stats == {"no-unused-vars": 1, "eqeqeq": 1, "no-console": 1}
        assert stats.to_dict()["totalErrors"] == 3

    def test_stats_unaffected_by_matching(self, single_baseline, sample_document):
        """Should report totals of the document, not of the leftovers."""
        single_baseline.save(sample_document)
        single_baseline.is_in_baseline("src/lib/util.js", "no-console", 1, "Unexpected console statement.")

        assert single_baseline.get_stats().total_errors == 3

    def test_stats_of_missing_baseline(self, single_baseline):
        """Should report zeros when nothing is stored."""
        assert single_baseline.get_stats() == BaselineStats()

    def test_detailed_stats(self, single_baseline):
        """Should sort rules and files by descending count and bucket severity."""
        single_baseline.save({
            "a.js": [
                BaselineFinding("semi", 1, 1, "m"),
                BaselineFinding("semi", 2, 1, "m"),
                BaselineFinding("eqeqeq", 3, 1, "e", severity=1),
            ],
            "b.js": [BaselineFinding("semi", 1, 1, "m", severity=2)],
        })

        stats = single_baseline.get_detailed_stats()

        assert stats.total_errors == 4
        assert stats.file_count == 2
        assert stats.rule_count == 2
        assert stats.rule_stats == [("semi", 3), ("eqeqeq", 1)]
        assert [(fs.file, fs.count) for fs in stats.file_stats] == [("a.js", 3), ("b.js", 1)]
        assert stats.file_stats[0].rules == {"semi": 2, "eqeqeq": 1}
        assert stats.severity_stats == {"error": 3, "warning": 1}

        data = stats.to_dict()
        assert data["ruleStats"][0] == {"rule": "semi", "count": 3}
        assert data["severityStats"] == {"error": 3, "warning": 1}


class TestPrune:
    """Test pruning against current findings."""

    def test_prune_removes_fixed_entries(self, single_baseline, sample_document):
        """Should keep entries still present and drop the rest."""
        single_baseline.save(sample_document)
        current = {
            "src/app.js": [BaselineFinding("eqeqeq", 3, 9, "Expected '===' and instead saw '=='.")],
            "src/new.js": [BaselineFinding("semi", 1, 1, "Missing semicolon.")],
        }

        result = single_baseline.prune(current)

        assert result.kept_count == 1
        assert result.removed_count == 2
        assert list(result.data) == ["src/app.js"]
        assert result.data["src/app.js"][0].column == 7

    def test_prune_file_missing_from_current(self, single_baseline):
        """Should drop every entry of a file the current findings omit."""
        single_baseline.save({"f.js": [
            BaselineFinding("semi", 1, 1, "a"),
            BaselineFinding("semi", 2, 1, "b"),
            BaselineFinding("semi", 3, 1, "c"),
        ]})

        result = single_baseline.prune({"other.js": [BaselineFinding("semi", 1, 1, "a")]})

        assert result.data == {}
        assert result.removed_count == 3
        assert result.kept_count == 0

    def test_prune_keeps_duplicates(self, single_baseline):
        """Should keep every duplicate whose fingerprint still occurs."""
        finding = BaselineFinding("semi", 1, 1, "m")
        single_baseline.save({"a.js": [finding, finding]})

        result = single_baseline.prune({"a.js": [finding]})

        assert result.kept_count == 2
        assert result.removed_count == 0

    def test_prune_does_not_mutate(self, single_baseline, sample_document):
        """Should leave the loaded document and matches untouched."""
        single_baseline.save(sample_document)
        single_baseline.prune({})

        assert single_baseline.get_stats().total_errors == 3
        assert single_baseline.is_in_baseline("src/lib/util.js", "no-console", 1, "Unexpected console statement.")


class TestFilterByRules:
    """Test rule filtering."""

    def test_filter_by_rules(self, sample_document):
        """Should keep only the named rules and drop empty files."""
        filtered = BaselineManager.filter_by_rules(sample_document, ["no-console", "eqeqeq"])

        assert set(filtered) == {"src/app.js", "src/lib/util.js"}
        assert [f.rule_id for f in filtered["src/app.js"]] == ["eqeqeq"]

    def test_filter_drops_files(self, sample_document):
        """Should omit files without matching findings."""
        filtered = BaselineManager.filter_by_rules(sample_document, ["no-console"])
        assert list(filtered) == ["src/lib/util.js"]

    def test_filter_empty_rules(self, sample_document):
        """Should return an empty document for no rules."""
        assert BaselineManager.filter_by_rules(sample_document, []) == {}
