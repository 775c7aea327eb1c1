#!/usr/bin/env python3
"""
Grocery POS Startup Script
Launches the register API and its dashboard.
"""
import signal
import subprocess
import sys
import threading
import time

from grocerypos.core.config import settings


class RegisterLauncher:
    """Launcher for the register's processes."""

    def __init__(self):
        self.processes = []
        self.running = True

    def start_api_server(self):
        """Start the FastAPI server; one worker, since the register's state lives in-process."""
        print("🚀 Starting Grocery POS API Server...")
        cmd = [
            sys.executable, "-m", "uvicorn",
            "grocerypos.main:app",
            "--host", "0.0.0.0",
            "--port", "8000",
        ]
        if settings.debug:
            cmd.append("--reload")

        process = subprocess.Popen(cmd)
        self.processes.append(("API Server", process))
        print("✅ API Server started on http://localhost:8000")

    def start_dashboard(self):
        """Start the Dash dashboard."""
        print("📊 Starting Grocery POS Dashboard...")
        process = subprocess.Popen([sys.executable, "-m", "grocerypos.dashboard.main"])
        self.processes.append(("Dashboard", process))
        print(f"✅ Dashboard started on http://localhost:{settings.dashboard_port}")

    def monitor_processes(self):
        """Report processes that exit unexpectedly."""
        reported = set()
        while self.running:
            for name, process in self.processes:
                if process.poll() is not None and name not in reported:
                    print(f"❌ {name} stopped unexpectedly (exit code {process.returncode})")
                    reported.add(name)
            time.sleep(5)

    def signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        print("\n🛑 Shutting down Grocery POS...")
        self.running = False

    def shutdown(self):
        """Shutdown all processes."""
        print("🔄 Stopping all processes...")
        for name, process in self.processes:
            if process.poll() is not None:
                continue
            try:
                process.terminate()
                process.wait(timeout=5)
                print(f"✅ {name} stopped")
            except subprocess.TimeoutExpired:
                process.kill()
                print(f"⚠️  {name} force killed")

    def run(self):
        """Run the register."""
        print(f"🛒 {settings.store_name} - Point of Sale")
        print("=" * 60)

        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

        try:
            self.start_api_server()
            time.sleep(2)

            self.start_dashboard()
            time.sleep(2)

            print("\n🎉 Grocery POS is now running!")
            print(f"📊 Dashboard: http://localhost:{settings.dashboard_port}")
            print("🔍 Health Check: http://localhost:8000/health")
            print("\nPress Ctrl+C to stop all services")

            monitor_thread = threading.Thread(target=self.monitor_processes, daemon=True)
            monitor_thread.start()

            while self.running:
                time.sleep(1)
        finally:
            self.shutdown()
            print("👋 Grocery POS stopped")


if __name__ == "__main__":
    launcher = RegisterLauncher()
    launcher.run()
