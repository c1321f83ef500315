from __future__ import annotations

from repobloat.cli import main

raise SystemExit(main())
