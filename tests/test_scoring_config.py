import unittest
import sys
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.config.scoring import get_scoring_config, get_scoring_int, get_scoring_value


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("fallback.ats.points_per_signal"), 20)
        self.assertEqual(get_scoring_value("fallback.tone_and_style.score"), 75)

    def test_missing_paths_return_default(self):
        self.assertIsNone(get_scoring_value("fallback.unknown.key"))
        self.assertEqual(get_scoring_value("", default=3), 3)
        self.assertEqual(get_scoring_int("fallback.unknown", 42), 42)

    def test_non_numeric_values_use_default(self):
        with patch("app.core.config.scoring.get_scoring_value", return_value="high"):
            self.assertEqual(get_scoring_int("fallback.ats.points_per_signal", 20), 20)


if __name__ == "__main__":
    unittest.main()
