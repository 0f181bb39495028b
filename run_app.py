#!/usr/bin/env python3
"""Direct launcher for FinanceFlow.

Runs ``streamlit run financeflow/Home.py`` with the project root on the
import path. Extra arguments are passed through to Streamlit.
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
entry_script = project_root / "financeflow" / "Home.py"

if __name__ == "__main__":
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(project_root), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-m", "streamlit", "run", str(entry_script), *sys.argv[1:]],
        env=env,
    )
    sys.exit(result.returncode)
