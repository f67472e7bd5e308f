import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import app.main  # noqa: F401
from app.core.config import settings
from app.core.config.scoring import get_scoring_value


class PipelineSmokeTests(unittest.TestCase):
    def test_safe_imports_and_defaults(self):
        self.assertEqual(get_scoring_value("fallback.structure.complete_score"), 85)
        self.assertGreater(settings.provider_timeout_s, 0)
        self.assertGreaterEqual(settings.min_ocr_text_chars, 1)


if __name__ == "__main__":
    unittest.main()
