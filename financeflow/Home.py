"""Streamlit entry script for FinanceFlow.

Run with ``streamlit run financeflow/Home.py``.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from financeflow.app import main

main()
