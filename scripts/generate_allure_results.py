"""Generate Allure results from the last behave run and its screenshots."""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from config import config  # noqa: E402
from core.errors import ReportFormatError  # noqa: E402
from main import generate_report  # noqa: E402

if __name__ == "__main__":
    try:
        sys.exit(generate_report(config))
    except ReportFormatError as e:
        print(f"Cannot generate report: {e}", file=sys.stderr)
        sys.exit(1)
