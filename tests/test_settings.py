"""
Tests for game settings and situations.
"""
import json
import pytest
import sys
from pathlib import Path

import yaml

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from atomica.board import Board
from atomica.exceptions import ConfigurationError, SituationFormatError
from atomica.settings import GameSettings, Level, DEFAULT_LEVELS
from atomica.situation import GameSituation

CONFIG_DIR = Path(__file__).parent.parent / "config"


class TestDefaults:
    """Test the built-in presets."""

    def test_default_settings(self):
        settings = GameSettings.default()
        assert (settings.cols, settings.rows) == (10, 10)
        assert settings.indicators_per_round == 5
        assert len(settings.levels) == 10
        assert settings.first_level == Level(1, 1000, 3)
        assert settings.last_level == Level(10, 0, 12)
        assert settings.is_last_level(settings.last_level)
        assert not settings.is_last_level(settings.first_level)

    def test_editor_default(self):
        settings = GameSettings.editor_default()
        assert settings.levels == [Level(1, 0, 3)]

    def test_get_level(self):
        settings = GameSettings.default()
        assert settings.get_level(3).number_of_colors == 5
        with pytest.raises(ConfigurationError):
            settings.get_level(0)
        with pytest.raises(ConfigurationError):
            settings.get_level(11)

    def test_default_yaml_matches_preset(self):
        assert GameSettings.from_yaml(CONFIG_DIR / "default.yaml") == GameSettings.default()
        assert GameSettings.from_yaml(CONFIG_DIR / "editor.yaml") == GameSettings.editor_default()


class TestValidation:
    """Test rejected configurations."""

    @pytest.mark.parametrize("kwargs", [
        {"cols": 2},
        {"rows": 31},
        {"levels": []},
        {"levels": [(2, 0, 3)]},
        {"levels": [(1, 10, 4), (2, 0, 4)]},
        {"levels": [(1, 0, 2)]},
        {"levels": [(1, 0, 13)]},
        {"levels": [(1, 100001, 3)]},
        {"indicators_per_round": 0},
        {"base_factor": 0},
    ])
    def test_invalid(self, kwargs):
        kwargs.setdefault("levels", list(DEFAULT_LEVELS))
        with pytest.raises(ConfigurationError):
            GameSettings(**kwargs)

    def test_from_dict_bad_level(self):
        with pytest.raises(ConfigurationError):
            GameSettings.from_dict({"levels": [{"number": 1}]})
        with pytest.raises(ConfigurationError):
            GameSettings.from_dict(["not", "a", "mapping"])


class TestYaml:
    """Test YAML persistence."""

    def test_round_trip(self, tmp_path):
        settings = GameSettings(cols=7, rows=12, levels=[(1, 50, 3), (2, 0, 6)],
                                indicators_per_round=2)
        path = tmp_path / "settings.yaml"
        settings.to_yaml(path)

        loaded = GameSettings.from_yaml(path)
        assert loaded == settings

    def test_missing_keys_use_defaults(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.safe_dump({"cols": 8}))
        settings = GameSettings.from_yaml(path)
        assert settings.cols == 8
        assert settings.rows == 10
        assert len(settings.levels) == 10

    def test_copy_is_independent(self):
        settings = GameSettings.default()
        copy = settings.copy()
        copy.levels[0].number_of_colors = 4
        assert settings.levels[0].number_of_colors == 3


class TestSituation:
    """Test situation snapshots."""

    def make_situation(self):
        settings = GameSettings(cols=4, rows=3, levels=[(1, 10, 3), (2, 0, 4)],
                                indicators_per_round=2)
        situation = GameSituation(settings)
        situation.board = Board.from_rows(["A.b.", "..C.", "d..."])
        situation.score = 12
        situation.current_level = settings.get_level(2)
        return situation

    def test_round_trip(self):
        situation = self.make_situation()
        restored = GameSituation.from_dict(situation.to_dict())

        assert restored.board == situation.board
        assert restored.score == 12
        assert restored.current_level.number == 2
        assert restored.settings == situation.settings
        assert not restored.game_over

    def test_dict_is_json(self):
        data = self.make_situation().to_dict()
        assert json.loads(json.dumps(data)) == data

    def test_save_load(self, tmp_path):
        situation = self.make_situation()
        situation.game_over = True
        path = tmp_path / "game.json"
        situation.save(path)

        loaded = GameSituation.load(path)
        assert loaded.board.to_rows() == ["A.b.", "..C.", "d..."]
        assert loaded.game_over

    def test_reset(self):
        situation = self.make_situation()
        situation.reset()
        assert situation.score == 0
        assert situation.current_level.number == 1
        assert situation.pieces() == []

    def test_resize(self):
        situation = self.make_situation()
        situation.set_cols(6)
        assert situation.cols == 6 and situation.settings.cols == 6
        with pytest.raises(ConfigurationError):
            situation.set_rows(40)
        assert situation.rows == 3 and situation.settings.rows == 3

    @pytest.mark.parametrize("mutate", [
        lambda d: d["board"].update(kinds=[[0] * 4] * 2),
        lambda d: d.update(score=-1),
        lambda d: d["board"]["kinds"][0].__setitem__(1, 7),
        lambda d: d["board"]["colors"][0].__setitem__(0, 4),
        lambda d: d["board"]["colors"][0].__setitem__(0, 300),
        lambda d: d["board"]["kinds"][0].__setitem__(1, 2 ** 70),
        lambda d: d.update(level=3),
        lambda d: d.pop("settings"),
    ])
    def test_invalid_snapshot(self, mutate):
        data = self.make_situation().to_dict()
        mutate(data)
        with pytest.raises(SituationFormatError):
            GameSituation.from_dict(data)

    def test_unparseable_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(SituationFormatError):
            GameSituation.load(path)
