"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from metre_inference.cli import app

from conftest import bars, make_sequence

runner = CliRunner()


def dump(path, sequences):
    path.write_text(json.dumps([[event.to_dict() for event in seq] for seq in sequences]))
    return path


@pytest.fixture
def corpus_file(tmp_path, mixed_corpus):
    return dump(tmp_path / "corpus.json", mixed_corpus)


@pytest.fixture
def test_file(tmp_path):
    return dump(
        tmp_path / "test.json",
        [
            make_sequence(bars((48, 24, 24), 4), None, None),
            make_sequence(bars((48, 24), 6), None, None),
        ],
    )


class TestInfer:
    def test_table_output(self, corpus_file, test_file):
        result = runner.invoke(app, ["infer", str(corpus_file), str(test_file), "--index", "1", "-r", "4"])
        assert result.exit_code == 0, result.output
        assert "Best metre:" in result.output
        assert "72/3 (3/4)" in result.output

    def test_json_output(self, corpus_file, test_file):
        result = runner.invoke(app, ["infer", str(corpus_file), str(test_file), "-r", "4", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["best_category"] == "96/4"
        assert len(data["information_content"]) == 12

    def test_verbose_shows_per_event_table(self, corpus_file, test_file):
        result = runner.invoke(app, ["infer", str(corpus_file), str(test_file), "-r", "4", "-v"])
        assert result.exit_code == 0, result.output
        assert "Per-event information content" in result.output
        assert "Timing Summary" in result.output

    def test_config_file(self, tmp_path, corpus_file, test_file):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"resolution": 4, "prior_mode": "flat"}))
        result = runner.invoke(app, ["infer", str(corpus_file), str(test_file), "-c", str(config), "--json"])
        assert result.exit_code == 0, result.output
        prior = json.loads(result.output)["prior"]
        assert len(prior) == 7

    def test_index_out_of_range(self, corpus_file, test_file):
        result = runner.invoke(app, ["infer", str(corpus_file), str(test_file), "--index", "5"])
        assert result.exit_code == 1
        assert "out of range" in result.output

    def test_missing_corpus(self, tmp_path, test_file):
        result = runner.invoke(app, ["infer", str(tmp_path / "nope.json"), str(test_file)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_option(self, corpus_file, test_file):
        result = runner.invoke(app, ["infer", str(corpus_file), str(test_file), "--texture", "polyphony"])
        assert result.exit_code == 1
        assert "texture" in result.output


class TestOtherCommands:
    def test_prior_by_phase(self, corpus_file):
        result = runner.invoke(app, ["prior", str(corpus_file), "-r", "4", "--prior", "flat", "--by-phase"])
        assert result.exit_code == 0, result.output
        assert "72/3@2" in result.output
        assert "0.1429" in result.output

    def test_prior_by_category(self, corpus_file):
        result = runner.invoke(app, ["prior", str(corpus_file), "-r", "4"])
        assert result.exit_code == 0, result.output
        assert "96/4 (4/4)" in result.output

    def test_evaluate_json(self, corpus_file):
        result = runner.invoke(app, ["evaluate", str(corpus_file), "-k", "2", "--seed", "0", "-r", "4", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["k"] == 2
        assert len(data["items"]) == 6

    def test_info(self, corpus_file):
        result = runner.invoke(app, ["info", str(corpus_file), "-r", "4"])
        assert result.exit_code == 0, result.output
        assert "Sequences: 6" in result.output
        assert "Events:" in result.output

    def test_prior_uses_configured_categories(self, tmp_path, corpus_file):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"resolution": 4, "categories": ["72/3"]}))
        result = runner.invoke(app, ["prior", str(corpus_file), "-c", str(config), "--by-phase"])
        assert result.exit_code == 0, result.output
        assert "72/3@0" in result.output
        assert "96/4" not in result.output
