"""
Tests for persistence, combined diagnostics, reporting and the CLI.
"""

import json

import numpy as np
import pytest

from decision_engine.cli import main, parse_weight
from decision_engine.config import AnalysisConfig
from decision_engine.engine.document import document_to_model, parse_rating_key
from decision_engine.engine.model import DecisionModel
from decision_engine.errors import ConfigurationError, DocumentError
from decision_engine.examples.sample_decision import build_example_model
from decision_engine.output.diagnostics import DecisionAnalyzer
from decision_engine.output.reporter import Reporter, ReportFormat


def make_model():
    """Worked example: X (importance 4), Y (importance 1); C is unrated."""
    model = DecisionModel(title="Pick a vendor", description="Annual contract")
    x = model.add_criterion("X", importance=4)
    y = model.add_criterion("Y", importance=1)
    a = model.add_option("A", "First vendor")
    b = model.add_option("B")
    model.add_option("C")
    model.set_rating(a.id, x.id, 5)
    model.set_rating(a.id, y.id, 0)
    model.set_rating(b.id, x.id, 0)
    model.set_rating(b.id, y.id, 5)
    return model


def write_document(tmp_path, data, name="decision.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestDocument:
    """Tests for the persisted document format."""
    
    def test_round_trip(self):
        model = make_model()
        data = json.loads(json.dumps(model.to_document(timestamp="2026-01-01T00:00:00+00:00")))
        
        loaded = DecisionModel.from_document(data)
        
        assert loaded.title == "Pick a vendor"
        assert loaded.description == "Annual contract"
        assert [o.name for o in loaded.options] == ["A", "B", "C"]
        assert loaded.importances() == model.importances()
        assert loaded.ratings == model.ratings
        assert loaded.normalized_weights() == pytest.approx(model.normalized_weights())
    
    def test_document_shape(self):
        data = make_model().to_document(timestamp="2026-01-01T00:00:00+00:00")
        
        assert data["version"] == "1.1"
        assert data["timestamp"] == "2026-01-01T00:00:00+00:00"
        assert data["weights"] == {"1": 4, "2": 1}
        assert sum(data["normalizedWeights"].values()) == pytest.approx(100.0)
        assert data["ratings"]["3-1"] == 5.0
    
    def test_legacy_title(self):
        model = document_to_model({"decision": "Old title", "options": [], "criteria": []})
        assert model.title == "Old title"
    
    def test_missing_importance_defaults_to_three(self):
        model = document_to_model({
            "title": "t",
            "criteria": [{"id": 1, "name": "Cost"}],
        })
        assert model.importances() == {1: 3}
    
    def test_stored_weights_are_recomputed(self):
        data = make_model().to_document()
        data["normalizedWeights"] = {"1": 50.0, "2": 50.0}
        
        model = DecisionModel.from_document(data)
        
        assert model.normalized_weights()[1] == pytest.approx(84.894259, abs=1e-6)
    
    def test_orphans_survive_loading(self):
        model = document_to_model({
            "title": "t",
            "options": [{"id": 1, "name": "A"}],
            "criteria": [{"id": 2, "name": "Cost"}],
            "weights": {"2": 3, "9": 5},
            "ratings": {"1-2": 4, "7-2": 1},
        })
        
        report = model.check_integrity()
        assert report.orphaned_ratings == [(7, 2)]
        assert report.orphaned_importances == [9]
    
    @pytest.mark.parametrize("data", [
        {"ratings": {"1-2": 7}},
        {"ratings": {"12": 3}},
        {"weights": {"1": 6}},
        {"options": [{"name": "no id"}]},
    ])
    def test_invalid_documents(self, data):
        with pytest.raises(DocumentError):
            document_to_model(data)
    
    def test_parse_rating_key(self):
        assert parse_rating_key("12-7") == (12, 7)


class TestDecisionAnalyzer:
    """Tests for the combined analysis."""
    
    def test_analyze(self):
        analysis = DecisionAnalyzer(rng=np.random.default_rng(1)).analyze(make_model())
        
        assert analysis.winner.option.name == "A"
        assert [r.option.name for r in analysis.ranked] == ["A", "C", "B"]
        assert analysis.display_weights == {1: 85, 2: 15}
        assert analysis.confidence.confidence_percentage == 76
        assert len(analysis.flip_points) == 2
        assert analysis.integrity.is_valid
        assert analysis.summary["winner"] == "A"
    
    def test_seeded_config_is_reproducible(self):
        model = build_example_model()
        config = AnalysisConfig(seed=11, stability_noise=1.0)
        
        first = DecisionAnalyzer(config).analyze(model)
        second = DecisionAnalyzer(config).analyze(model)
        
        assert first.confidence.stability == second.confidence.stability
    
    def test_describe_mentions_tie(self):
        model = DecisionModel(title="Coin flip")
        c = model.add_criterion("Only")
        for name in ("Heads", "Tails"):
            model.set_rating(model.add_option(name).id, c.id, 3)
        
        text = DecisionAnalyzer(AnalysisConfig(seed=0)).analyze(model).describe()
        
        assert "tie between Heads, Tails" in text
    
    def test_library_is_silent_without_configuration(self, capsys):
        model = make_model()
        model.ratings[(99, 1)] = 3.0
        assert model.prune_orphans() == 1
        
        DecisionAnalyzer().analyze(model)
        
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""
    
    def test_no_options(self):
        with pytest.raises(ConfigurationError):
            DecisionAnalyzer().analyze(DecisionModel())
    
    def test_example_model(self):
        analysis = DecisionAnalyzer(AnalysisConfig(seed=42)).analyze(build_example_model())
        
        assert len(analysis.ranked) == 4
        assert sum(analysis.display_weights.values()) == 100
        assert analysis.integrity.missing_ratings == 0


class TestReporter:
    """Tests for report generation."""
    
    def test_text(self):
        analysis = DecisionAnalyzer(AnalysisConfig(seed=0)).analyze(make_model())
        text = Reporter(analysis).generate(ReportFormat.TEXT)
        
        assert "Recommendation: A" in text
        assert "Confidence: 76% (high)" in text
    
    def test_json(self):
        analysis = DecisionAnalyzer(AnalysisConfig(seed=0)).analyze(make_model())
        data = json.loads(Reporter(analysis).generate(ReportFormat.JSON))
        
        assert data["title"] == "Pick a vendor"
        assert data["ranking"][0]["option"]["name"] == "A"
        assert data["ranking"][0]["rank"] == 1
        assert data["confidence"]["level"] == "high"
        assert data["risk"]["winner_name"] == "A"
    
    def test_format_from_name(self):
        assert ReportFormat.from_name("json") is ReportFormat.JSON
        with pytest.raises(ValueError):
            ReportFormat.from_name("html")


class TestCli:
    """Tests for the command-line interface."""
    
    def test_analyze_text(self, tmp_path, capsys):
        path = write_document(tmp_path, make_model().to_document())
        
        assert main(["analyze", path, "--seed", "1"]) == 0
        assert "Recommendation: A" in capsys.readouterr().out
    
    def test_analyze_json_to_file(self, tmp_path, capsys):
        path = write_document(tmp_path, make_model().to_document())
        output = tmp_path / "report.json"
        
        assert main(["analyze", path, "--format", "json", "--output", str(output)]) == 0
        
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["summary"]["winner"] == "A"
        assert "Report saved to" in capsys.readouterr().out
    
    def test_whatif(self, tmp_path, capsys):
        path = write_document(tmp_path, make_model().to_document())
        
        assert main(["whatif", path, "--set", "1=10", "--set", "2=90"]) == 0
        
        out = capsys.readouterr().out
        assert "Winner changed! Now: B" in out
        assert "#1 B" in out
    
    def test_whatif_unknown_criterion(self, tmp_path, capsys):
        path = write_document(tmp_path, make_model().to_document())
        
        assert main(["whatif", path, "--set", "99=10"]) == 1
        assert "Unknown criterion id: 99" in capsys.readouterr().err
    
    def test_demo(self, capsys):
        assert main(["demo"]) == 0
        assert "Which apartment should I rent?" in capsys.readouterr().out
    
    def test_missing_file(self, tmp_path, capsys):
        assert main(["analyze", str(tmp_path / "nope.json")]) == 1
        assert "error:" in capsys.readouterr().err
    
    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        
        assert main(["analyze", str(path)]) == 1
        assert "not valid JSON" in capsys.readouterr().err
    
    def test_whatif_non_finite_weight(self, tmp_path, capsys):
        path = write_document(tmp_path, make_model().to_document())
        
        assert main(["whatif", path, "--set", "1=nan"]) == 1
        assert "finite" in capsys.readouterr().err
    
    def test_no_command(self, capsys):
        assert main([]) == 1
    
    def test_parse_weight(self):
        assert parse_weight("3=42.5") == (3, 42.5)
        with pytest.raises(ValueError):
            parse_weight("3:42")
