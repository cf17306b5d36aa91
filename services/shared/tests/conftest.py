"""Test configuration for shared module tests."""

import os
import sys
from pathlib import Path

# services/ no sys.path para importar o pacote shared
SHARED_DIR = Path(__file__).resolve().parents[1]
SERVICES_DIR = SHARED_DIR.parent

services_path = str(SERVICES_DIR)
if services_path not in sys.path:
    sys.path.insert(0, services_path)

# Sem conexões reais com Redis durante os testes
os.environ["REDIS_URL"] = ""
