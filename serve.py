#!/usr/bin/env python3
"""
Radius Server
Starts the FastAPI backend with uvicorn and stops it on Ctrl+C.

Host and port follow the same API_HOST / API_PORT variables the backend
settings read.
"""

import os
import socket
import subprocess
import sys
import time
from pathlib import Path

BACKEND_DIR = Path(__file__).parent / 'backend'
API_HOST = os.environ.get('API_HOST', '0.0.0.0')
API_PORT = int(os.environ.get('API_PORT', '8000'))


def check_backend_running(port=API_PORT):
    """Check if something already listens on the API port"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    result = sock.connect_ex(('localhost', port))
    sock.close()
    return result == 0


def start_backend():
    """Start the FastAPI backend"""
    print("Starting backend server...")
    process = subprocess.Popen(
        [sys.executable, '-m', 'uvicorn', 'api.main:app', '--host', API_HOST, '--port', str(API_PORT)],
        cwd=str(BACKEND_DIR),
    )

    print("Waiting for backend to start...")
    for _ in range(30):
        if process.poll() is not None:
            break
        if check_backend_running():
            print("✅ Backend started successfully!")
            return process
        time.sleep(0.5)

    print("❌ Backend failed to start")
    stop_backend(process)
    return None


def stop_backend(process):
    """Stop the backend process"""
    if process is None or process.poll() is not None:
        return
    print("🔄 Stopping backend...")
    process.terminate()
    try:
        process.wait(timeout=5)
    except subprocess.TimeoutExpired:
        process.kill()


def main():
    print("=" * 50)
    print("  Radius - Job Listing Backend")
    print("=" * 50)
    print()

    if check_backend_running():
        print(f"✅ Backend already running on http://localhost:{API_PORT}")
        return

    process = start_backend()
    if not process:
        print("\nFailed to start backend. Please check logs.")
        sys.exit(1)

    print()
    print(f"  Backend API: http://localhost:{API_PORT}")
    print(f"  API Docs:    http://localhost:{API_PORT}/docs")
    print()
    print("  Press Ctrl+C to stop")
    print("=" * 50)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        stop_backend(process)
        print("✅ Server stopped")


if __name__ == '__main__':
    main()
