#!/usr/bin/env python
"""
Launch the phaseline Streamlit app.

Usage:
    python run_gui.py [streamlit options]
    streamlit run phaseline/gui.py
"""

import subprocess
import sys
import os

GUI_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "phaseline", "gui.py")


def main(argv=None):
    """Run ``streamlit run phaseline/gui.py`` with any extra options passed through."""
    argv = sys.argv[1:] if argv is None else argv
    command = [sys.executable, "-m", "streamlit", "run", GUI_PATH] + list(argv)

    try:
        return subprocess.run(command, check=True).returncode
    except FileNotFoundError:
        print("Error: Python interpreter or Streamlit not found.")
        print("Install with: pip install streamlit")
        return 1
    except subprocess.CalledProcessError as e:
        print(f"Streamlit exited with status {e.returncode}")
        return e.returncode
    except KeyboardInterrupt:
        print("\nphaseline GUI closed.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
