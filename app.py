"""
Launcher: runs the Streamlit frontend against an already running SuitCraft API.
"""

import atexit
import os
import signal
import subprocess
import sys
import time
import webbrowser

ROOT = os.path.dirname(os.path.abspath(__file__))
FRONTEND_DIR = os.path.join(ROOT, "frontend")
PORT = os.getenv("SUITCRAFT_PORT", "8501")

_frontend = None


def stop_frontend():
    if _frontend is None or _frontend.poll() is not None:
        return
    if sys.platform == "win32":
        subprocess.run(["taskkill", "/F", "/T", "/PID", str(_frontend.pid)], capture_output=True)
        return
    _frontend.terminate()
    try:
        _frontend.wait(timeout=5)
    except subprocess.TimeoutExpired:
        _frontend.kill()


def on_signal(signum, frame):
    print("\nShutting down SuitCraft...")
    stop_frontend()
    sys.exit(0)


def start_frontend() -> subprocess.Popen:
    return subprocess.Popen(
        [sys.executable, "-m", "streamlit", "run", "app.py",
         "--server.headless", "true", "--server.port", PORT],
        cwd=FRONTEND_DIR,
    )


def main():
    global _frontend

    api_url = os.getenv("SUITCRAFT_API_URL") or os.getenv("VITE_API_URL") or "http://localhost:5000/api/v1"
    url = f"http://localhost:{PORT}"

    atexit.register(stop_frontend)
    signal.signal(signal.SIGINT, on_signal)
    if sys.platform != "win32":
        signal.signal(signal.SIGTERM, on_signal)

    print(f"\nSuitCraft API: {api_url}")
    _frontend = start_frontend()
    print(f"SuitCraft UI:  {url}  (Ctrl+C to stop)\n")

    time.sleep(2)
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        pass

    try:
        code = _frontend.wait()
        if code:
            print(f"Frontend exited with code {code}")
    except KeyboardInterrupt:
        pass
    finally:
        stop_frontend()


if __name__ == "__main__":
    main()
