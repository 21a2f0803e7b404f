from __future__ import annotations

import os
import tempfile

# CONFIG_DIR is resolved at import time, so the managed skills dir must point at a
# throwaway home before any clawdis module is imported.
os.environ["CLAWDIS_HOME"] = tempfile.mkdtemp(prefix="clawdis-tests-")
