from __future__ import annotations

import sys

from web_inspector.cli import main

sys.exit(main())
