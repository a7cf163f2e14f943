#!/usr/bin/env python3
"""``imgparams`` URL resolver.

Usage:
    python scripts/resolve_url.py "/photos/cat.jpg?w=800&f=s"
    python scripts/resolve_url.py "/cat.jpg?im.blur=20" --advanced
    python scripts/resolve_url.py "/cat.jpg?im=Resize,width=800" --config scripts/user_config.py -v

Note: User config in scripts/user_config.py, expert defaults in imgparams.schemas.param
"""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(project_root / "src"))

from imgparams.cli.resolve_url import main


if __name__ == "__main__":
    sys.exit(main())
