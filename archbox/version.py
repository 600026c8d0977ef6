from pathlib import Path

THIS_DIR = Path(__file__).parent
__version__ = (THIS_DIR / "version.txt").read_text().strip()
__source__ = "https://github.com/archbox/archbox"
