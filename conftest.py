import sys
from pathlib import Path
import os

# Ensure repo root on sys.path for imports from anywhere in tests tree.
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("BLOCKFORGE_DEFAULT_PACK", "minecraft:vanilla")
os.environ.setdefault("BLOCKFORGE_COMPUTE_TIMEOUT_S", "10")
os.environ.setdefault("BLOCKFORGE_COMPUTE_WORKERS", "2")
os.environ.setdefault("BLOCKFORGE_ASYNC_COMPUTE", "1")
os.environ.setdefault("BLOCKFORGE_LOG_LEVEL", "WARNING")
