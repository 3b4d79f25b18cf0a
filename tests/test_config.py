"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from contextualizer.config import ComparisonConfig, Config, SelectionConfig

REPO_ROOT = Path(__file__).resolve().parent.parent


def test_defaults():
    config = Config()
    assert config.source.country == "IR"
    assert config.source.population == 88550570
    assert config.selection.scope == "document"
    assert config.comparison.approximate_low == 0.85
    assert config.comparison.approximate_high == 1.15
    assert config.output.countries is None
    assert config.workers == 1


def test_yaml_round_trip(tmp_path):
    config = Config()
    config.selection.scope = "global"
    config.output.countries = ["US", "FR"]
    path = tmp_path / "config.yaml"

    config.to_yaml(path)
    loaded = Config.from_yaml(path)

    assert loaded == config
    assert isinstance(loaded.data.contexts_dir, Path)


def test_shipped_config():
    config = Config.from_yaml(REPO_ROOT / "config.yaml")
    assert config.data.default_country == "US"
    assert config.data.stories_dir == Path("data/stories")


def test_string_paths_converted():
    config = Config(data={"contexts_dir": "somewhere/contexts"})
    assert config.data.contexts_dir == Path("somewhere/contexts")


@pytest.mark.parametrize(
    "values",
    [
        {"approximate_low": 1.2, "approximate_high": 1.5},
        {"approximate_low": 0.5, "approximate_high": 0.9},
        {"fraction_tolerance": 2.0},
    ],
)
def test_invalid_comparison_band(values):
    with pytest.raises(ValidationError):
        ComparisonConfig(**values)


def test_invalid_values():
    with pytest.raises(ValidationError):
        Config(workers=0)
    with pytest.raises(ValidationError):
        Config(selection={"scope": "galaxy"})
    with pytest.raises(ValidationError):
        Config(source={"population": 0})


def test_scope_documents_cross_story_behaviour():
    description = SelectionConfig.model_fields["scope"].description
    assert "'document'" in description
    assert "'global'" in description
    assert "across stories" in description
