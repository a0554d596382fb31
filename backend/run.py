#!/usr/bin/env python3
"""
MapChat Backend - Run Script
This script starts the FastAPI backend server
"""

import os
import sys
import subprocess
import socket
from pathlib import Path
from urllib.parse import urlparse

def print_colored(message, color="blue"):
    """Print colored output"""
    colors = {
        "red": "\033[91m",
        "green": "\033[92m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "reset": "\033[0m"
    }
    print(f"{colors.get(color, '')}{message}{colors['reset']}")

def check_file_exists(filepath, error_message):
    """Check if a file exists"""
    if not Path(filepath).exists():
        print_colored(f"❌ Error: {error_message}", "red")
        sys.exit(1)

def check_port_open(host, port):
    """Check if a port is open"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.settimeout(2)
    result = sock.connect_ex((host, port))
    sock.close()
    return result == 0

def main():
    print_colored("🚀 Starting MapChat Backend...", "blue")

    # Check if we're in the backend directory
    check_file_exists("mapchat/main.py", "mapchat/main.py not found. Please run this script from the backend directory.")

    if not Path(".env").exists() and not Path("../.env").exists():
        print_colored("⚠️  Warning: .env file not found.", "yellow")
        print("Create a .env file in the project root with at least:")
        print("  GOOGLE_MAPS_API_KEY=your_api_key_here")
        print("  OLLAMA_BASE_URL=http://localhost:11434")
        print("  OLLAMA_MODEL=phi3:mini")
        print()

    # Check if Ollama is running
    ollama_url = urlparse(os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434"))
    print_colored("🔍 Checking Ollama connection...", "blue")
    if not check_port_open(ollama_url.hostname or "localhost", ollama_url.port or 11434):
        print_colored(f"⚠️  Warning: Ollama doesn't appear to be running at {ollama_url.geturl()}", "yellow")
        print("Chat answers will fall back to plain place lists. Start it with:")
        print("  ollama serve && ollama pull phi3:mini")
        print()

    # Check if dependencies are installed
    print_colored("🔍 Checking dependencies...", "blue")
    try:
        import fastapi
        import uvicorn
    except ImportError:
        print_colored("❌ Dependencies not installed.", "red")
        print("Installing dependencies...")
        subprocess.run([sys.executable, "-m", "pip", "install", "-e", ".."], check=True)

    # Start the server
    print_colored("✅ All checks passed!", "green")
    print_colored("🌐 Starting Uvicorn server...", "blue")
    print("📍 Backend will be available at: http://localhost:8000")
    print("📍 API Health check: http://localhost:8000/api/health")
    print("📍 API Documentation: http://localhost:8000/docs")
    print()
    print("Press Ctrl+C to stop the server")
    print()

    # Run uvicorn with auto-reload for development
    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "mapchat.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", "8000"
        ], check=True)
    except KeyboardInterrupt:
        print_colored("\n👋 Backend server stopped.", "yellow")
    except subprocess.CalledProcessError as e:
        print_colored(f"\n❌ Error starting server: {e}", "red")
        sys.exit(1)

if __name__ == "__main__":
    main()
