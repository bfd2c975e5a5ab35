from __future__ import annotations

import sys

from geopath.main import main

sys.exit(main())
